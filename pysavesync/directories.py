"""Local storage roots used by the emulator and the save synchronizer."""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from .exceptions import SaveSyncLocalStorageError

logger = logging.getLogger(__name__)

# Sub-directories of the base storage area
PRIVATE_AREA = "files"
SHARED_AREA = "external"


class LocalRoot(str, Enum):
    """Fixed set of local root directories."""

    SAVES = "saves"
    STATES = "states"
    STATES_PREVIEW = "state-previews"
    CORES = "cores"
    SYSTEM = "system"
    INTERNAL_STATES = "internal-states"
    INTERNAL_ROMS = "roms"

    @property
    def area(self) -> str:
        """Storage area (private or shared) holding this root."""
        if self in (LocalRoot.CORES, LocalRoot.SYSTEM, LocalRoot.INTERNAL_STATES):
            return PRIVATE_AREA
        return SHARED_AREA

    @property
    def dir_name(self) -> str:
        """Directory name of this root inside its area."""
        # The deprecated private states dir shares its name with the shared one
        if self is LocalRoot.INTERNAL_STATES:
            return "states"
        return self.value


class DirectoriesManager:
    """Resolves local roots below a base storage area.

    Every root is created on first access. Roots are never deleted.

    Examples:
        >>> manager = DirectoriesManager(Path("/data/pysavesync"))
        >>> manager.get_saves_directory()
        PosixPath('/data/pysavesync/external/saves')
    """

    def __init__(self, data_dir: Path, save_storage_folder: Optional[str] = None):
        """Initialize the directories manager.

        Args:
            data_dir: Base application storage area
            save_storage_folder: Configured external folder reference
                (empty or None means sync is disabled)
        """
        self.data_dir = Path(data_dir)
        self.save_storage_folder = save_storage_folder

    def local_root_path(self, kind: LocalRoot) -> Path:
        """Return the directory for ``kind`` without creating it."""
        return (self.data_dir / kind.area / kind.dir_name).absolute()

    def resolve_local_root(self, kind: LocalRoot) -> Path:
        """Return the directory for ``kind``, creating it if needed.

        Args:
            kind: Local root to resolve

        Returns:
            Absolute path of the local root

        Raises:
            SaveSyncLocalStorageError: If the directory cannot be created
        """
        path = self.local_root_path(kind)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SaveSyncLocalStorageError(
                f"Cannot create local directory {path}: {e}"
            ) from e
        if not path.is_dir():
            raise SaveSyncLocalStorageError(f"Local root is not a directory: {path}")
        return path

    def resolve_external_root(self) -> Optional[str]:
        """Return the external folder reference, or None if not configured."""
        if not self.save_storage_folder or not self.save_storage_folder.strip():
            return None
        return self.save_storage_folder.strip()

    def get_saves_directory(self) -> Path:
        return self.resolve_local_root(LocalRoot.SAVES)

    def get_states_directory(self) -> Path:
        return self.resolve_local_root(LocalRoot.STATES)

    def get_states_preview_directory(self) -> Path:
        return self.resolve_local_root(LocalRoot.STATES_PREVIEW)

    def get_cores_directory(self) -> Path:
        return self.resolve_local_root(LocalRoot.CORES)

    def get_system_directory(self) -> Path:
        return self.resolve_local_root(LocalRoot.SYSTEM)

    def get_internal_states_directory(self) -> Path:
        """Deprecated private states directory, kept for older installs."""
        return self.resolve_local_root(LocalRoot.INTERNAL_STATES)

    def get_internal_roms_directory(self) -> Path:
        return self.resolve_local_root(LocalRoot.INTERNAL_ROMS)
