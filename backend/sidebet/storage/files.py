"""YAML snapshots of the document database for local runs.

A snapshot maps collection names to documents keyed by id:

    bets:
      bet_1:
        title: Who wins the derby?
        status: CLOSED
        participants: [alice, bob]
    users:
      alice:
        displayName: Alice
"""

import logging
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from sidebet.bets.timing import to_iso_string

from .exceptions import StorageError
from .memory import MemoryStore

logger = logging.getLogger(__name__)


def _as_stored(value: Any) -> Any:
    """Unquoted YAML timestamps load as datetimes; store them as client ISO strings."""
    if isinstance(value, datetime):
        return to_iso_string(value)
    if isinstance(value, dict):
        return {key: _as_stored(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_as_stored(item) for item in value]
    return value


def load_snapshot(path: Path) -> MemoryStore:
    """Load a YAML snapshot into a MemoryStore."""
    if not path.exists():
        raise StorageError(f"Snapshot not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Corrupted YAML in snapshot {path}: {e}")
        raise

    if not isinstance(raw, dict):
        raise StorageError(f"Snapshot must map collection names to documents: {path}")

    collections = {}
    for name, docs in raw.items():
        if docs is None:
            docs = {}
        if not isinstance(docs, dict):
            raise StorageError(f"Collection '{name}' must map ids to documents")
        collections[str(name)] = {
            str(doc_id): _as_stored(dict(data or {})) for doc_id, data in docs.items()
        }

    logger.debug(f"Loaded snapshot from {path}")
    return MemoryStore(collections)


def save_snapshot(store: MemoryStore, path: Path) -> None:
    """Atomically write a MemoryStore back to a YAML snapshot.

    Writes to a temp file in the same directory, then renames over the target.
    """
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            delete=False,
            suffix=".yaml",
            encoding="utf-8",
        ) as temp_file:
            yaml.safe_dump(
                store.dump(),
                temp_file,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )
            temp_path = Path(temp_file.name)

        shutil.move(str(temp_path), str(path))
        logger.debug(f"Saved snapshot to {path}")

    except Exception as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        logger.error(f"Failed to save snapshot: {e}")
        raise
