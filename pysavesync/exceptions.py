"""Custom exceptions for save synchronization."""

from typing import Optional


class SaveSyncError(Exception):
    """Base exception for save synchronization errors."""

    pass


class SaveSyncConfigError(SaveSyncError):
    """Configuration value is malformed."""

    pass


class SaveSyncAccessError(SaveSyncError):
    """Access to the external folder could not be obtained or re-confirmed.

    This error is fatal for a whole sync pass; no files are touched.
    """

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


class SaveSyncLocalStorageError(SaveSyncError):
    """Local storage is unusable (e.g. a local root cannot be created)."""

    pass


class SaveSyncCancelledError(SaveSyncError):
    """A sync pass was cancelled while in flight."""

    pass


class SaveSyncFileError(SaveSyncError):
    """Base class for errors that only affect a single file of a pass."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SaveSyncIOError(SaveSyncFileError):
    """Opening, reading or writing a single file failed."""

    pass


class SaveSyncConflictError(SaveSyncFileError):
    """A path segment has the wrong node type on the destination side."""

    pass


class SaveSyncPathError(SaveSyncFileError):
    """Relative path is empty or contains a traversal segment."""

    pass
