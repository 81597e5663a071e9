"""External storage backed by a directory on a mounted filesystem.

Suitable for removable media, network shares and cloud-backed mounts.
"""

import logging
import os
import stat
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import unquote, urlparse

from ..exceptions import SaveSyncAccessError
from .base import AccessMode, ExternalNode, ExternalStorage

logger = logging.getLogger(__name__)


def reference_to_path(reference: str) -> Path:
    """Convert a folder reference (plain path or ``file://`` URI) to a path.

    Args:
        reference: Configured external folder reference

    Returns:
        Absolute path of the referenced folder

    Examples:
        >>> reference_to_path("file:///media/card/saves%20sync")
        PosixPath('/media/card/saves sync')
    """
    if reference.startswith("file://"):
        parsed = urlparse(reference)
        return Path(unquote(parsed.path)).absolute()
    return Path(reference).expanduser().absolute()


class DirectoryStorage(ExternalStorage):
    """ExternalStorage implementation over a local filesystem directory."""

    def _node_for(self, path: Path) -> ExternalNode:
        try:
            mode = path.lstat().st_mode
        except OSError:
            mode = 0
        return ExternalNode(
            name=path.name,
            is_directory=stat.S_ISDIR(mode),
            is_file=stat.S_ISREG(mode),
            identity=path,
        )

    def resolve_root(self, reference: str) -> Optional[ExternalNode]:
        path = reference_to_path(reference)
        if not path.is_dir():
            logger.debug("External root is not a directory: %s", path)
            return None
        # The root itself may be a symlink chosen by the user
        return ExternalNode(
            name=path.name, is_directory=True, is_file=False, identity=path
        )

    def acquire_access(self, reference: str, mode: AccessMode) -> None:
        path = reference_to_path(reference)
        if not path.exists():
            raise SaveSyncAccessError(
                f"External folder does not exist: {path}", reference=reference
            )
        if not path.is_dir():
            raise SaveSyncAccessError(
                f"External folder is not a directory: {path}", reference=reference
            )

        required = os.R_OK | os.X_OK
        if mode == AccessMode.READ_WRITE:
            required |= os.W_OK
        if not os.access(path, required):
            raise SaveSyncAccessError(
                f"Permission denied for external folder ({mode.value}): {path}",
                reference=reference,
            )
        logger.debug("Access granted (%s) for %s", mode.value, path)

    def list_children(self, node: ExternalNode) -> list[ExternalNode]:
        path: Path = node.identity
        return [self._node_for(child) for child in sorted(path.iterdir())]

    def find_child(self, node: ExternalNode, name: str) -> Optional[ExternalNode]:
        child = node.identity / name
        if not os.path.lexists(child):
            return None
        return self._node_for(child)

    def create_directory(self, node: ExternalNode, name: str) -> ExternalNode:
        child: Path = node.identity / name
        child.mkdir()
        return self._node_for(child)

    def create_file(self, node: ExternalNode, name: str) -> ExternalNode:
        child: Path = node.identity / name
        # Exclusive creation: fails if a concurrent writer created it first
        with open(child, "xb"):
            pass
        return self._node_for(child)

    def open_read(self, node: ExternalNode) -> Optional[BinaryIO]:
        path: Path = node.identity
        if not path.is_file():
            return None
        return open(path, "rb")

    def open_write(self, node: ExternalNode) -> Optional[BinaryIO]:
        path: Path = node.identity
        if path.exists() and not path.is_file():
            return None
        return open(path, "wb")
