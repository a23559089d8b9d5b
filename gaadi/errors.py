"""Exception hierarchy for the gaadi core."""


class GaadiError(Exception):
    """Base exception for all gaadi errors."""


class StorageError(GaadiError):
    """Backing store failure."""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)


class StorageReadError(StorageError):
    """Read failed or the stored payload could not be parsed."""


class StorageWriteError(StorageError):
    """Write to the backing store failed."""


class EntityNotFound(GaadiError):
    """A referenced id is not present in its collection."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} '{entity_id}' not found")


class UnauthenticatedMutation(GaadiError):
    """A mutation was attempted with no active user."""
