"""Wires local directories, configuration and external storage together."""

import logging
import threading
from typing import Optional

from .config import Config
from .directories import DirectoriesManager, LocalRoot
from .storage import DirectoryStorage, ExternalStorage
from .sync import DEFAULT_CHUNK_SIZE, SyncEngine, SyncResult, SyncSettings

logger = logging.getLogger(__name__)


class SaveStorageManager:
    """Syncs saves and states with the user-chosen external folder.

    Each pass receives a fresh settings snapshot; the manager never
    writes configuration.
    """

    def __init__(
        self,
        directories: DirectoriesManager,
        storage: Optional[ExternalStorage] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize the save storage manager.

        Args:
            directories: Local directories manager
            storage: External storage backend (defaults to DirectoryStorage)
            chunk_size: Chunk size for streamed copies
            cancel_event: Event that aborts an in-flight pass when set
        """
        self.directories = directories
        self.storage = storage or DirectoryStorage()
        self.chunk_size = chunk_size
        self.engine = SyncEngine(self.storage, cancel_event=cancel_event)

    @classmethod
    def from_config(
        cls, cfg: Config, storage: Optional[ExternalStorage] = None, **kwargs
    ) -> "SaveStorageManager":
        """Create a manager from stored configuration."""
        directories = DirectoriesManager(
            data_dir=cfg.get_data_dir(),
            save_storage_folder=cfg.get_save_storage_folder(),
        )
        return cls(directories, storage=storage, **kwargs)

    def settings(self) -> SyncSettings:
        """Build the configuration snapshot for one pass."""
        return SyncSettings(
            external_root=self.directories.resolve_external_root(),
            saves_dir=self.directories.local_root_path(LocalRoot.SAVES),
            states_dir=self.directories.local_root_path(LocalRoot.STATES),
            chunk_size=self.chunk_size,
        )

    def is_supported(self) -> bool:
        """Return True if an external folder is configured and resolvable."""
        reference = self.directories.resolve_external_root()
        if reference is None:
            return False
        try:
            return self.storage.resolve_root(reference) is not None
        except OSError as e:
            logger.debug("External folder check failed: %s", e)
            return False

    def sync_to_custom_directory(self, progress_callback=None) -> SyncResult:
        """Push local saves and states to the external folder (sync out)."""
        return self.engine.sync_out(self.settings(), progress_callback)

    def sync_from_custom_directory(self, progress_callback=None) -> SyncResult:
        """Pull saves and states from the external folder (sync in)."""
        return self.engine.sync_in(self.settings(), progress_callback)
