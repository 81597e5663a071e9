"""External storage abstraction consumed by the sync engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, Optional


class AccessMode(str, Enum):
    """Access level requested for an external folder."""

    READ = "read"
    READ_WRITE = "read_write"


@dataclass(frozen=True)
class ExternalNode:
    """A node in the external tree."""

    name: str
    """Node name (a single path segment)"""

    is_directory: bool
    """True if the node can hold children"""

    is_file: bool
    """True if the node holds content"""

    identity: Any
    """Opaque, stable identity used by the storage backend"""


class ExternalStorage(ABC):
    """Tree of named nodes supporting listing, creation and streamed I/O.

    Nodes are only obtained by resolving a root, listing a parent, or
    finding/creating a child. The sync engine never caches them across
    passes.

    Backends must report I/O failures as ``OSError`` (from the methods here
    and from the streams they return). The engine turns those into per-file
    skips; any other exception type aborts the pass.
    """

    @abstractmethod
    def resolve_root(self, reference: str) -> Optional[ExternalNode]:
        """Return the root directory node, or None if the reference is invalid."""

    @abstractmethod
    def acquire_access(self, reference: str, mode: AccessMode) -> None:
        """Obtain (or re-confirm) a durable access grant for ``reference``.

        Raises:
            SaveSyncAccessError: If access cannot be granted
        """

    @abstractmethod
    def list_children(self, node: ExternalNode) -> list[ExternalNode]:
        """List the direct children of a directory node."""

    @abstractmethod
    def find_child(self, node: ExternalNode, name: str) -> Optional[ExternalNode]:
        """Find a direct child by exact name."""

    @abstractmethod
    def create_directory(self, node: ExternalNode, name: str) -> ExternalNode:
        """Create a directory child."""

    @abstractmethod
    def create_file(self, node: ExternalNode, name: str) -> ExternalNode:
        """Create an empty file child."""

    @abstractmethod
    def open_read(self, node: ExternalNode) -> Optional[BinaryIO]:
        """Open a file node for reading."""

    @abstractmethod
    def open_write(self, node: ExternalNode) -> Optional[BinaryIO]:
        """Open a file node for writing, truncating existing content."""
