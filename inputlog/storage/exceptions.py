class StorageError(Exception):
    """Base exception for all durable log store errors."""


class TransientIOError(StorageError):
    """Raised when a read or write fails; the operation is abandoned, not retried."""


class NotFoundError(StorageError):
    """Raised when a move source does not exist."""


class AlreadyExistsError(StorageError):
    """Raised when a move destination is already present."""


class DirectoryCreationError(StorageError):
    """Raised when the store cannot create its workspace directories."""


class ClaimConflictError(StorageError):
    """Raised when a pending file was already claimed by another invocation."""
