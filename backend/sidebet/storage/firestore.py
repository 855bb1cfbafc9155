"""Firestore-backed document store."""

import logging
from pathlib import Path
from typing import Any, Sequence

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import Conflict, NotFound
from google.cloud.firestore_v1 import Client
from google.cloud.firestore_v1.base_query import FieldFilter

from sidebet.config import FirebaseConfig

from .base import Document, Filter
from .exceptions import DocumentNotFoundError, StorageConfigError

logger = logging.getLogger(__name__)


def _initialize_app(config: FirebaseConfig) -> None:
    if firebase_admin._apps:
        return

    options = {"projectId": config.project_id} if config.project_id else None

    if config.credentials_path:
        path = Path(config.credentials_path)
        if not path.exists():
            raise StorageConfigError(
                f"Service account file not found: {config.credentials_path}"
            )
        cred = credentials.Certificate(str(path))
    else:
        # Application default credentials (Cloud Functions, gcloud auth)
        cred = None

    firebase_admin.initialize_app(cred, options)
    logger.info("Firebase initialized")


class FirestoreStore:
    """Document store on top of the Firebase Admin SDK."""

    def __init__(self, config: FirebaseConfig | None = None, client: Client | None = None):
        if client is None:
            _initialize_app(config or FirebaseConfig())
            client = firestore.client()
        self._db = client

    @property
    def db(self) -> Client:
        """Underlying Firestore client."""
        return self._db

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        snap = self._db.collection(collection).document(doc_id).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> list[Document]:
        ref = self._db.collection(collection)
        for field, op, value in filters:
            ref = ref.where(filter=FieldFilter(field, op, value))
        return [Document(snap.id, snap.to_dict() or {}) for snap in ref.stream()]

    def add(self, collection: str, data: dict[str, Any]) -> str:
        _, doc_ref = self._db.collection(collection).add(data)
        logger.debug(f"Added {collection}/{doc_ref.id}")
        return doc_ref.id

    def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        try:
            self._db.collection(collection).document(doc_id).create(data)
        except Conflict:
            return False
        return True

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        try:
            self._db.collection(collection).document(doc_id).update(fields)
        except NotFound as e:
            raise DocumentNotFoundError(collection, doc_id) from e

    def close(self) -> None:
        """Close the Firestore client."""
        try:
            self._db.close()
        except Exception as e:
            logger.error(f"Error closing Firestore: {e}")
