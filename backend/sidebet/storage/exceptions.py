"""Storage layer exceptions."""


class StorageError(Exception):
    """Base storage exception."""

    pass


class DocumentNotFoundError(StorageError):
    """Document does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class StorageConfigError(StorageError):
    """Store could not be configured."""

    pass
