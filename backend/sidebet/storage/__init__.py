"""Storage layer for SideBet.

This package provides:
- The DocumentStore interface and collection names
- MemoryStore for local runs and tests
- YAML snapshot load/save for the CLI

FirestoreStore lives in ``sidebet.storage.firestore`` and is imported on demand
so the Firebase SDK is only loaded where it is used.
"""

from .base import (
    COLLECTION_BETS,
    COLLECTION_FRIEND_REQUESTS,
    COLLECTION_GROUPS,
    COLLECTION_LEADERBOARDS,
    COLLECTION_NOTIFICATION_KEYS,
    COLLECTION_NOTIFICATIONS,
    COLLECTION_SETTLEMENTS,
    COLLECTION_USERS,
    Document,
    DocumentStore,
    Filter,
)
from .exceptions import DocumentNotFoundError, StorageConfigError, StorageError
from .files import load_snapshot, save_snapshot
from .memory import MemoryStore

__all__ = [
    "COLLECTION_BETS",
    "COLLECTION_FRIEND_REQUESTS",
    "COLLECTION_GROUPS",
    "COLLECTION_LEADERBOARDS",
    "COLLECTION_NOTIFICATION_KEYS",
    "COLLECTION_NOTIFICATIONS",
    "COLLECTION_SETTLEMENTS",
    "COLLECTION_USERS",
    "Document",
    "DocumentStore",
    "Filter",
    "StorageError",
    "DocumentNotFoundError",
    "StorageConfigError",
    "MemoryStore",
    "load_snapshot",
    "save_snapshot",
]
