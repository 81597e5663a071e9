"""Sync engine for pysavesync - push/pull of saves and states."""

from .engine import (
    BackgroundSyncRunner,
    SyncEngine,
    SyncPhase,
    SyncResult,
    SyncSettings,
)
from .modes import SyncDirection
from .operations import DEFAULT_CHUNK_SIZE, SyncOperations, copy_stream
from .paths import (
    Namespace,
    from_external_path,
    normalize_path,
    split_path,
    to_external_path,
)
from .resolver import NodeResolver
from .scanner import DirectoryScanner, ExternalFile, ExternalTreeWalker, LocalFile

__all__ = [
    "SyncEngine",
    "SyncPhase",
    "SyncResult",
    "SyncSettings",
    "BackgroundSyncRunner",
    "SyncDirection",
    "SyncOperations",
    "DEFAULT_CHUNK_SIZE",
    "copy_stream",
    "Namespace",
    "from_external_path",
    "normalize_path",
    "split_path",
    "to_external_path",
    "NodeResolver",
    "DirectoryScanner",
    "ExternalFile",
    "ExternalTreeWalker",
    "LocalFile",
]
