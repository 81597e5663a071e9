"""Copy operations between local files and external nodes."""

import logging
import threading
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from ..exceptions import (
    SaveSyncCancelledError,
    SaveSyncConflictError,
    SaveSyncIOError,
)
from ..storage import ExternalNode, ExternalStorage
from .resolver import NodeResolver
from .scanner import ExternalFile, LocalFile

logger = logging.getLogger(__name__)

# Chunk size for streamed copies (1 MB)
DEFAULT_CHUNK_SIZE: int = 1024 * 1024

Opener = Callable[[], Optional[BinaryIO]]


def copy_stream(
    open_source: Opener,
    open_destination: Opener,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable[[int], None]] = None,
    label: str = "",
) -> int:
    """Stream bytes from a source to a destination in bounded chunks.

    Both ends are closed on every exit path. The destination is written in
    place, so a failure or cancellation mid-copy can leave it truncated.

    Args:
        open_source: Callable returning a readable binary stream (or None)
        open_destination: Callable returning a writable binary stream (or None)
        chunk_size: Maximum bytes read per chunk
        cancel_event: Optional event; when set the copy stops between chunks
        progress_callback: Optional callback receiving bytes written per chunk
        label: Path used in error messages

    Returns:
        Number of bytes copied

    Raises:
        SaveSyncIOError: If either end cannot be opened or streaming fails
        SaveSyncCancelledError: If ``cancel_event`` was set mid-copy
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")

    copied = 0
    with ExitStack() as stack:
        try:
            source = open_source()
            if source is None:
                raise SaveSyncIOError(f"Cannot open source: {label}", path=label)
            stack.enter_context(source)

            destination = open_destination()
            if destination is None:
                raise SaveSyncIOError(f"Cannot open destination: {label}", path=label)
            stack.enter_context(destination)

            while True:
                if cancel_event is not None and cancel_event.is_set():
                    raise SaveSyncCancelledError(f"Copy cancelled: {label}")
                chunk = source.read(chunk_size)
                if not chunk:
                    break
                destination.write(chunk)
                copied += len(chunk)
                if progress_callback:
                    progress_callback(len(chunk))
        except OSError as e:
            raise SaveSyncIOError(f"I/O error copying {label}: {e}", path=label) from e

    return copied


class SyncOperations:
    """Per-file push and pull operations."""

    def __init__(
        self,
        storage: ExternalStorage,
        resolver: Optional[NodeResolver] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize sync operations.

        Args:
            storage: External storage backend
            resolver: Node resolver (created from storage if omitted)
            chunk_size: Chunk size for streamed copies
            cancel_event: Event checked between chunks
        """
        self.storage = storage
        self.resolver = resolver or NodeResolver(storage)
        self.chunk_size = chunk_size
        self.cancel_event = cancel_event

    def push_file(
        self,
        local_file: LocalFile,
        external_root: ExternalNode,
        external_path: str,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> int:
        """Copy a local file to ``external_path`` below the external root.

        Args:
            local_file: Local file to copy
            external_root: External root directory node
            external_path: Namespaced relative path (e.g. ``saves/game1.sav``)
            progress_callback: Optional callback receiving bytes per chunk

        Returns:
            Number of bytes copied
        """
        node = self.resolver.resolve(external_root, external_path)
        return copy_stream(
            lambda: open(local_file.path, "rb"),
            lambda: self.storage.open_write(node),
            chunk_size=self.chunk_size,
            cancel_event=self.cancel_event,
            progress_callback=progress_callback,
            label=external_path,
        )

    def pull_file(
        self,
        external_file: ExternalFile,
        local_path: Path,
        progress_callback: Optional[Callable[[int], None]] = None,
        local_root: Optional[Path] = None,
    ) -> int:
        """Copy an external file node to ``local_path``.

        Missing parent directories are created. Symlinks are never written
        through: a symlink at the destination, or at any directory between
        ``local_root`` and the destination, is a conflict.

        Args:
            external_file: External file to copy
            local_path: Local destination path
            progress_callback: Optional callback receiving bytes per chunk
            local_root: Root that ``local_path`` must stay inside

        Returns:
            Number of bytes copied
        """
        self._check_destination(external_file, local_path, local_root)
        try:
            local_path.parent.mkdir(parents=True, exist_ok=True)
        except (FileExistsError, NotADirectoryError) as e:
            raise SaveSyncConflictError(
                f"Expected a directory at {local_path.parent}: {e}",
                path=external_file.relative_path,
            ) from e
        except OSError as e:
            raise SaveSyncIOError(
                f"Cannot create directory {local_path.parent}: {e}",
                path=external_file.relative_path,
            ) from e

        return copy_stream(
            lambda: self.storage.open_read(external_file.node),
            lambda: open(local_path, "wb"),
            chunk_size=self.chunk_size,
            cancel_event=self.cancel_event,
            progress_callback=progress_callback,
            label=external_file.relative_path,
        )

    def _check_destination(
        self,
        external_file: ExternalFile,
        local_path: Path,
        local_root: Optional[Path],
    ) -> None:
        if local_root is not None:
            parent = local_path.parent
            while parent != local_root and local_root in parent.parents:
                if parent.is_symlink():
                    raise SaveSyncConflictError(
                        f"Refusing to write through symlink {parent}",
                        path=external_file.relative_path,
                    )
                parent = parent.parent
        if local_path.is_symlink():
            raise SaveSyncConflictError(
                f"Refusing to write through symlink {local_path}",
                path=external_file.relative_path,
            )
        if local_path.exists() and not local_path.is_file():
            raise SaveSyncConflictError(
                f"Expected a file at {local_path}", path=external_file.relative_path
            )
