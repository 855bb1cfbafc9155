"""In-process document store for local runs and tests."""

import copy
import logging
import operator
import threading
from typing import Any, Callable, Sequence
from uuid import uuid4

from .base import Document, Filter
from .exceptions import DocumentNotFoundError, StorageError

logger = logging.getLogger(__name__)

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _matches(data: dict[str, Any], field: str, op: str, value: Any) -> bool:
    # Missing fields never match, as in Firestore
    if field not in data:
        return False
    current = data[field]

    if op == "==":
        return current == value
    if op == "!=":
        return current != value
    if op == "array-contains":
        return isinstance(current, list) and value in current
    if op in _COMPARISONS:
        if current is None:
            return False
        try:
            return _COMPARISONS[op](current, value)
        except TypeError:
            return False

    raise StorageError(f"Unsupported query operator: {op}")


class MemoryStore:
    """Dict-backed document store.

    Documents are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self, collections: dict[str, dict[str, dict[str, Any]]] | None = None):
        self._collections: dict[str, dict[str, dict[str, Any]]] = copy.deepcopy(
            collections or {}
        )
        self._lock = threading.Lock()

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            data = self._collection(collection).get(doc_id)
            return copy.deepcopy(data) if data is not None else None

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> list[Document]:
        with self._lock:
            items = copy.deepcopy(list(self._collection(collection).items()))

        results = []
        for doc_id, data in items:
            if all(_matches(data, field, op, value) for field, op, value in filters):
                results.append(Document(doc_id, data))
        return results

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid4().hex[:20]
        with self._lock:
            self._collection(collection)[doc_id] = copy.deepcopy(data)
        logger.debug(f"Added {collection}/{doc_id}")
        return doc_id

    def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        with self._lock:
            docs = self._collection(collection)
            if doc_id in docs:
                return False
            docs[doc_id] = copy.deepcopy(data)
        return True

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            docs = self._collection(collection)
            if doc_id not in docs:
                raise DocumentNotFoundError(collection, doc_id)
            docs[doc_id].update(copy.deepcopy(fields))

    def dump(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Copy of every collection, keyed by document id."""
        with self._lock:
            return copy.deepcopy(self._collections)
