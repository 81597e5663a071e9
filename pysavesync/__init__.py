"""PySaveSync - mirror emulator saves and states with an external folder."""

from .config import Config
from .directories import DirectoriesManager, LocalRoot
from .exceptions import (
    SaveSyncAccessError,
    SaveSyncCancelledError,
    SaveSyncConfigError,
    SaveSyncConflictError,
    SaveSyncError,
    SaveSyncFileError,
    SaveSyncIOError,
    SaveSyncLocalStorageError,
    SaveSyncPathError,
)
from .manager import SaveStorageManager
from .storage import AccessMode, DirectoryStorage, ExternalNode, ExternalStorage
from .sync import SyncDirection, SyncEngine, SyncResult, SyncSettings

__all__ = [
    "Config",
    "DirectoriesManager",
    "LocalRoot",
    "SaveStorageManager",
    "AccessMode",
    "DirectoryStorage",
    "ExternalNode",
    "ExternalStorage",
    "SyncDirection",
    "SyncEngine",
    "SyncResult",
    "SyncSettings",
    "SaveSyncError",
    "SaveSyncAccessError",
    "SaveSyncCancelledError",
    "SaveSyncConfigError",
    "SaveSyncConflictError",
    "SaveSyncFileError",
    "SaveSyncIOError",
    "SaveSyncLocalStorageError",
    "SaveSyncPathError",
]
