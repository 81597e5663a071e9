"""Find-or-create resolution of file nodes in the external tree."""

import logging
import threading
from typing import Optional

from ..exceptions import SaveSyncConflictError, SaveSyncFileError, SaveSyncIOError
from ..storage import ExternalNode, ExternalStorage
from .paths import split_path

logger = logging.getLogger(__name__)


class NodeResolver:
    """Resolves namespaced relative paths to file nodes, creating missing ones.

    Resolution never replaces an existing node of the wrong type. Calls are
    serialized so two resolutions cannot race to create the same child.
    """

    def __init__(self, storage: ExternalStorage):
        """Initialize the resolver.

        Args:
            storage: External storage backend
        """
        self.storage = storage
        self._lock = threading.Lock()

    def resolve(self, root: ExternalNode, relative_path: str) -> ExternalNode:
        """Find or create the file node at ``relative_path`` below ``root``.

        Args:
            root: External root directory node
            relative_path: Path such as ``saves/sub/game2.sav``

        Returns:
            The file node

        Raises:
            SaveSyncConflictError: If a segment has the wrong node type
            SaveSyncIOError: If the backend fails to find or create a node
            SaveSyncPathError: If the path is empty or contains ``.``/``..``
        """
        segments = split_path(relative_path)
        *directories, file_name = segments

        with self._lock:
            try:
                current = root
                for index, name in enumerate(directories):
                    child = self.storage.find_child(current, name)
                    if child is None:
                        logger.debug(
                            "Creating directory %s", "/".join(segments[: index + 1])
                        )
                        child = self.storage.create_directory(current, name)
                    if not child.is_directory:
                        raise SaveSyncConflictError(
                            f"Expected a directory at "
                            f"{'/'.join(segments[: index + 1])!r}",
                            path=relative_path,
                        )
                    current = child

                node = self.storage.find_child(current, file_name)
                if node is None:
                    node = self.storage.create_file(current, file_name)
            except OSError as e:
                raise SaveSyncIOError(
                    f"Cannot resolve {relative_path}: {e}", path=relative_path
                ) from e

        if not node.is_file:
            raise SaveSyncConflictError(
                f"Expected a file at {relative_path!r}", path=relative_path
            )
        return node

    def find_or_create(
        self, root: ExternalNode, relative_path: str
    ) -> Optional[ExternalNode]:
        """Like resolve(), but returns None instead of raising on failure."""
        try:
            return self.resolve(root, relative_path)
        except SaveSyncFileError as e:
            logger.warning("Cannot resolve %s: %s", relative_path, e)
            return None
