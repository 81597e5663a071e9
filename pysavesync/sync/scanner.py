"""Directory scanning utilities for sync operations."""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..storage import ExternalNode, ExternalStorage

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Represents a local file found by a scan."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    size: int
    """File size in bytes at scan time"""

    @classmethod
    def from_entry(cls, entry: os.DirEntry, base_path: Path) -> "LocalFile":
        """Create LocalFile from a directory entry.

        Args:
            entry: Directory entry of a regular file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance
        """
        file_path = Path(entry.path)
        return cls(
            path=file_path,
            # Use as_posix() to ensure forward slashes on all platforms
            relative_path=file_path.relative_to(base_path).as_posix(),
            size=entry.stat(follow_symlinks=False).st_size,
        )


@dataclass
class ExternalFile:
    """Represents a file node in the external tree."""

    node: ExternalNode
    """File node from the storage backend"""

    relative_path: str
    """Path relative to the walked root, built from ancestor names"""

    @property
    def name(self) -> str:
        return self.node.name


class ExternalTreeWalker:
    """Lazy depth-first walk over an external tree.

    Only nodes reporting ``is_directory`` are expanded and only nodes
    reporting ``is_file`` are yielded. Directories are listed when the walk
    reaches them, so memory is bounded by the pending siblings along the
    current path.

    The walker is one-shot; create a new one to walk again.
    """

    def __init__(self, storage: ExternalStorage, root: ExternalNode):
        self.storage = storage
        self.root = root
        # Frames of (directory node, path prefix, pending children)
        self._stack: list[tuple[ExternalNode, str, Optional[Iterator[ExternalNode]]]]
        self._stack = [(root, "", None)]

    def __iter__(self) -> "ExternalTreeWalker":
        return self

    def __next__(self) -> ExternalFile:
        while self._stack:
            directory, prefix, children = self._stack[-1]
            if children is None:
                children = self._list(directory)
                self._stack[-1] = (directory, prefix, children)

            child = next(children, None)
            if child is None:
                self._stack.pop()
                continue

            child_path = f"{prefix}/{child.name}" if prefix else child.name
            if child.is_directory:
                if self._is_ancestor(child):
                    logger.warning("Skipping directory cycle at %s", child_path)
                    continue
                self._stack.append((child, child_path, None))
            elif child.is_file:
                return ExternalFile(node=child, relative_path=child_path)
            else:
                logger.debug("Skipping node of unknown type: %s", child_path)

        raise StopIteration

    def _list(self, directory: ExternalNode) -> Iterator[ExternalNode]:
        try:
            return iter(self.storage.list_children(directory))
        except OSError as e:
            # Skip directories we can't list
            logger.warning("Cannot list external directory %s: %s", directory.name, e)
            return iter(())

    def _is_ancestor(self, node: ExternalNode) -> bool:
        return any(frame[0].identity == node.identity for frame in self._stack)


class DirectoryScanner:
    """Scans local and external trees, yielding files lazily.

    Every call starts a fresh traversal; nothing is cached between calls
    because the trees may change between passes.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for f in scanner.iter_local(Path("/data/external/saves")):
        ...     print(f.relative_path)
    """

    def iter_local(self, root: Path) -> Iterator[LocalFile]:
        """Recursively yield every regular file below ``root``.

        Symbolic links are never followed and non-regular files (devices,
        sockets, FIFOs) are skipped. Entries are visited in name order.

        Args:
            root: Directory to scan

        Yields:
            LocalFile objects in depth-first order
        """
        if not root.is_dir():
            logger.debug("Local root does not exist, nothing to scan: %s", root)
            return

        stack: list[Iterator[os.DirEntry]] = [self._scan_dir(root)]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            try:
                if entry.is_dir(follow_symlinks=False):
                    stack.append(self._scan_dir(Path(entry.path)))
                elif entry.is_file(follow_symlinks=False):
                    yield LocalFile.from_entry(entry, root)
            except OSError as e:
                # Skip files we can't stat
                logger.warning("Cannot read %s: %s", entry.path, e)

    def _scan_dir(self, directory: Path) -> Iterator[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            # Skip directories we can't read
            logger.warning("Cannot list local directory %s: %s", directory, e)
            entries = []
        return iter(entries)

    def iter_external(
        self, storage: ExternalStorage, root: ExternalNode
    ) -> ExternalTreeWalker:
        """Walk all file nodes below an external root.

        Args:
            storage: External storage backend
            root: Directory node to walk

        Returns:
            A fresh ExternalTreeWalker
        """
        return ExternalTreeWalker(storage, root)
