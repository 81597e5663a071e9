"""Shared fixtures for pysavesync tests."""

import io
from pathlib import Path
from typing import BinaryIO, Optional

import pytest

from pysavesync.exceptions import SaveSyncAccessError
from pysavesync.storage import AccessMode, ExternalNode, ExternalStorage
from pysavesync.sync import SyncSettings

MEMORY_REFERENCE = "mem://root"


class _WriteBuffer(io.BytesIO):
    """Buffer that commits its content to the storage on close."""

    def __init__(self, storage: "MemoryStorage", key: tuple):
        super().__init__()
        self._storage = storage
        self._key = key

    def close(self) -> None:
        if not self.closed:
            self._storage.files[self._key] = self.getvalue()
        super().close()


class MemoryStorage(ExternalStorage):
    """In-memory ExternalStorage used to observe and inject behavior.

    Node identities are tuples of path segments; the root is ``()``.
    """

    def __init__(self) -> None:
        self.dirs: set[tuple] = {()}
        self.files: dict[tuple, bytes] = {}
        self.others: set[tuple] = set()
        self.calls: list[str] = []
        self.deny_access = False
        self.fail_read: set[tuple] = set()
        self.fail_write: set[tuple] = set()

    # Helpers for arranging trees in tests

    def add_file(self, path: str, content: bytes) -> None:
        key = tuple(path.split("/"))
        for i in range(1, len(key)):
            self.dirs.add(key[:i])
        self.files[key] = content

    def add_dir(self, path: str) -> None:
        key = tuple(path.split("/"))
        for i in range(1, len(key) + 1):
            self.dirs.add(key[:i])

    def add_other(self, path: str) -> None:
        key = tuple(path.split("/"))
        for i in range(1, len(key)):
            self.dirs.add(key[:i])
        self.others.add(key)

    def read(self, path: str) -> Optional[bytes]:
        return self.files.get(tuple(path.split("/")))

    def _node(self, key: tuple) -> Optional[ExternalNode]:
        if key in self.dirs:
            return ExternalNode(
                name=key[-1] if key else "", is_directory=True, is_file=False, identity=key
            )
        if key in self.files:
            return ExternalNode(
                name=key[-1], is_directory=False, is_file=True, identity=key
            )
        if key in self.others:
            return ExternalNode(
                name=key[-1], is_directory=False, is_file=False, identity=key
            )
        return None

    # ExternalStorage implementation

    def resolve_root(self, reference: str) -> Optional[ExternalNode]:
        self.calls.append("resolve_root")
        if reference != MEMORY_REFERENCE:
            return None
        return self._node(())

    def acquire_access(self, reference: str, mode: AccessMode) -> None:
        self.calls.append("acquire_access")
        if self.deny_access:
            raise SaveSyncAccessError("Permission revoked", reference=reference)

    def list_children(self, node: ExternalNode) -> list[ExternalNode]:
        self.calls.append("list_children")
        parent = node.identity
        keys = self.dirs | set(self.files) | self.others
        children = sorted(
            k for k in keys if len(k) == len(parent) + 1 and k[: len(parent)] == parent
        )
        return [self._node(k) for k in children]

    def find_child(self, node: ExternalNode, name: str) -> Optional[ExternalNode]:
        self.calls.append("find_child")
        return self._node(node.identity + (name,))

    def create_directory(self, node: ExternalNode, name: str) -> ExternalNode:
        self.calls.append("create_directory")
        key = node.identity + (name,)
        if self._node(key) is not None:
            raise FileExistsError(name)
        self.dirs.add(key)
        return self._node(key)

    def create_file(self, node: ExternalNode, name: str) -> ExternalNode:
        self.calls.append("create_file")
        key = node.identity + (name,)
        if self._node(key) is not None:
            raise FileExistsError(name)
        self.files[key] = b""
        return self._node(key)

    def open_read(self, node: ExternalNode) -> Optional[BinaryIO]:
        self.calls.append("open_read")
        if node.identity in self.fail_read:
            raise PermissionError(f"Cannot read {node.name}")
        content = self.files.get(node.identity)
        if content is None:
            return None
        return io.BytesIO(content)

    def open_write(self, node: ExternalNode) -> Optional[BinaryIO]:
        self.calls.append("open_write")
        if node.identity in self.fail_write:
            raise PermissionError(f"Cannot write {node.name}")
        if node.identity not in self.files:
            return None
        return _WriteBuffer(self, node.identity)


@pytest.fixture
def memory_storage():
    """Provide an empty in-memory external storage."""
    return MemoryStorage()


@pytest.fixture
def local_roots(tmp_path):
    """Provide empty local saves and states roots."""
    saves = tmp_path / "local" / "saves"
    states = tmp_path / "local" / "states"
    saves.mkdir(parents=True)
    states.mkdir(parents=True)
    return saves, states


@pytest.fixture
def memory_settings(local_roots):
    """Provide settings pointing at the in-memory storage."""
    saves, states = local_roots
    return SyncSettings(external_root=MEMORY_REFERENCE, saves_dir=saves, states_dir=states)


@pytest.fixture
def external_dir(tmp_path):
    """Provide an empty external folder on disk."""
    path = tmp_path / "external"
    path.mkdir()
    return path


@pytest.fixture
def write_file():
    """Provide a helper creating a file (and parents) with content."""

    def _write(path: Path, content: bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _write
