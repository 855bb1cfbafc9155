"""Document store interface shared by the Firestore and in-memory backends."""

from typing import Any, NamedTuple, Protocol, Sequence

# Firestore collection names
COLLECTION_BETS = "bets"
COLLECTION_USERS = "users"
COLLECTION_GROUPS = "groups"
COLLECTION_FRIEND_REQUESTS = "friendRequests"
COLLECTION_SETTLEMENTS = "settlements"
COLLECTION_NOTIFICATIONS = "notifications"
COLLECTION_NOTIFICATION_KEYS = "notificationKeys"
COLLECTION_LEADERBOARDS = "leaderboards"

# (field, operator, value), operators as in Firestore: ==, !=, <, <=, >, >=, array-contains
Filter = tuple[str, str, Any]


class Document(NamedTuple):
    """A stored document and its id."""

    id: str
    data: dict[str, Any]


class DocumentStore(Protocol):
    """Minimal document database surface used by the backend."""

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return document fields, or None if it does not exist."""
        ...

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> list[Document]:
        """Return documents matching every filter."""
        ...

    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Append a document with a generated id and return the id."""
        ...

    def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        """Create a document with a fixed id. False if it already exists."""
        ...

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: if the document does not exist
        """
        ...
