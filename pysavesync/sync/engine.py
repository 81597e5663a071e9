"""Core sync engine for executing save/state sync passes."""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..exceptions import (
    SaveSyncAccessError,
    SaveSyncCancelledError,
    SaveSyncConflictError,
    SaveSyncFileError,
    SaveSyncLocalStorageError,
)
from ..storage import AccessMode, ExternalNode, ExternalStorage
from .modes import SyncDirection
from .operations import DEFAULT_CHUNK_SIZE, SyncOperations
from .paths import Namespace, from_external_path, to_external_path
from .resolver import NodeResolver
from .scanner import DirectoryScanner

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], None]


class SyncPhase(str, Enum):
    """Phases of a single sync pass."""

    IDLE = "idle"
    ACQUIRING_ACCESS = "acquiring_access"
    WALKING = "walking"
    COPYING = "copying"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class SyncSettings:
    """Configuration snapshot handed to the engine for one pass."""

    external_root: Optional[str]
    """External folder reference (None or empty means sync is disabled)"""

    saves_dir: Path
    """Local saves root"""

    states_dir: Path
    """Local states root"""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    """Chunk size for streamed copies"""

    @property
    def enabled(self) -> bool:
        return bool(self.external_root and self.external_root.strip())

    def local_root(self, namespace: Namespace) -> Path:
        if namespace is Namespace.SAVES:
            return self.saves_dir
        return self.states_dir


@dataclass
class SyncResult:
    """Outcome of a completed sync pass."""

    direction: SyncDirection
    copied: int = 0
    skipped: int = 0
    conflicts: int = 0
    bytes_copied: int = 0
    skipped_paths: list[str] = field(default_factory=list)
    disabled: bool = False
    """True if no external folder was configured (no-op pass)"""

    def to_dict(self) -> dict:
        """Convert result to dictionary for JSON output."""
        return {
            "direction": self.direction.value,
            "copied": self.copied,
            "skipped": self.skipped,
            "conflicts": self.conflicts,
            "bytes_copied": self.bytes_copied,
            "skipped_paths": list(self.skipped_paths),
            "disabled": self.disabled,
        }


class SyncEngine:
    """Mirrors local saves/states to an external folder and back.

    Each pass is a full overwrite of the destination for every file present
    on the source side. Nothing is deleted and no change detection is done.
    Files are copied one at a time in walk order.

    Examples:
        >>> engine = SyncEngine(DirectoryStorage())
        >>> settings = SyncSettings("/media/card/sync", saves, states)
        >>> result = engine.sync_out(settings)
        >>> print(f"Copied {result.copied} file(s)")
    """

    def __init__(
        self,
        storage: ExternalStorage,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize sync engine.

        Args:
            storage: External storage backend
            cancel_event: Event that aborts an in-flight pass when set
        """
        self.storage = storage
        self.cancel_event = cancel_event or threading.Event()
        self.scanner = DirectoryScanner()
        self.phase = SyncPhase.IDLE

    def cancel(self) -> None:
        """Request cancellation of the in-flight pass.

        The flag is reset when the next pass starts, so a request made while
        idle does not carry over.
        """
        self.cancel_event.set()

    def _set_phase(self, phase: SyncPhase) -> None:
        logger.debug("Sync phase: %s -> %s", self.phase.value, phase.value)
        self.phase = phase

    def sync(
        self,
        direction: SyncDirection,
        settings: SyncSettings,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """Run one pass in ``direction``.

        Args:
            direction: PUSH (local to external) or PULL (external to local)
            settings: Configuration snapshot for this pass
            progress_callback: Optional callback(relative_path, bytes_copied)
                called after each copied file

        Returns:
            SyncResult with per-pass statistics

        Raises:
            SaveSyncAccessError: If the external folder cannot be accessed
            SaveSyncLocalStorageError: If a local root cannot be created
            SaveSyncCancelledError: If the pass was cancelled
        """
        if direction is SyncDirection.PUSH:
            return self.sync_out(settings, progress_callback)
        return self.sync_in(settings, progress_callback)

    def sync_out(
        self,
        settings: SyncSettings,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """Push local saves and states to the external folder."""
        result = SyncResult(direction=SyncDirection.PUSH)
        root = self._begin(SyncDirection.PUSH, settings, result)
        if root is None:
            return result

        operations = self._operations(settings)
        start_time = time.time()
        try:
            for namespace in Namespace:
                local_root = self._ensure_local_root(settings.local_root(namespace))
                for local_file in self.scanner.iter_local(local_root):
                    external_path = f"{namespace.value}/{local_file.relative_path}"
                    self._run_file(
                        result,
                        external_path,
                        lambda: operations.push_file(
                            local_file,
                            root,
                            to_external_path(local_file.relative_path, namespace),
                        ),
                        progress_callback,
                    )
        except SaveSyncCancelledError:
            self._set_phase(SyncPhase.ABORTED)
            self.cancel_event.clear()
            raise
        except BaseException:
            self._set_phase(SyncPhase.ABORTED)
            raise

        self._finish(result, start_time)
        return result

    def sync_in(
        self,
        settings: SyncSettings,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """Pull saves and states from the external folder into local storage.

        Files outside the ``saves/`` and ``states/`` namespaces are ignored.
        """
        result = SyncResult(direction=SyncDirection.PULL)
        root = self._begin(SyncDirection.PULL, settings, result)
        if root is None:
            return result

        operations = self._operations(settings)
        start_time = time.time()
        try:
            local_roots = {
                namespace: self._ensure_local_root(settings.local_root(namespace))
                for namespace in Namespace
            }
            for external_file in self.scanner.iter_external(self.storage, root):
                mapped = self._map_external(external_file.relative_path, result)
                if mapped is None:
                    continue
                namespace, local_relative = mapped
                local_root = local_roots[namespace]
                local_path = local_root.joinpath(*local_relative.split("/"))
                self._run_file(
                    result,
                    external_file.relative_path,
                    lambda: operations.pull_file(
                        external_file, local_path, local_root=local_root
                    ),
                    progress_callback,
                )
        except SaveSyncCancelledError:
            self._set_phase(SyncPhase.ABORTED)
            self.cancel_event.clear()
            raise
        except BaseException:
            self._set_phase(SyncPhase.ABORTED)
            raise

        self._finish(result, start_time)
        return result

    def _begin(
        self,
        direction: SyncDirection,
        settings: SyncSettings,
        result: SyncResult,
    ) -> Optional[ExternalNode]:
        """Acquire access and resolve the external root.

        Returns:
            Root node, or None if sync is disabled (no-op pass)
        """
        self.phase = SyncPhase.IDLE
        self.cancel_event.clear()
        if not settings.enabled:
            logger.debug("No external folder configured, skipping %s", direction.value)
            result.disabled = True
            self._set_phase(SyncPhase.DONE)
            return None

        reference = (settings.external_root or "").strip()
        if direction is SyncDirection.PUSH:
            mode = AccessMode.READ_WRITE
        else:
            mode = AccessMode.READ
        self._set_phase(SyncPhase.ACQUIRING_ACCESS)
        try:
            self.storage.acquire_access(reference, mode)
            root = self.storage.resolve_root(reference)
        except SaveSyncAccessError as e:
            logger.error("Cannot access external folder %s: %s", reference, e)
            self._set_phase(SyncPhase.ABORTED)
            raise
        except OSError as e:
            logger.error("Cannot access external folder %s: %s", reference, e)
            self._set_phase(SyncPhase.ABORTED)
            raise SaveSyncAccessError(
                f"Cannot access external folder: {e}", reference=reference
            ) from e

        if root is None or not root.is_directory:
            logger.error("External folder cannot be resolved: %s", reference)
            self._set_phase(SyncPhase.ABORTED)
            raise SaveSyncAccessError(
                f"External folder cannot be resolved: {reference}",
                reference=reference,
            )

        logger.debug(
            "Starting %s: %s -> %s",
            direction.value,
            direction.source_label,
            direction.destination_label,
        )
        self._set_phase(SyncPhase.WALKING)
        return root

    def _operations(self, settings: SyncSettings) -> SyncOperations:
        return SyncOperations(
            self.storage,
            NodeResolver(self.storage),
            chunk_size=settings.chunk_size,
            cancel_event=self.cancel_event,
        )

    def _ensure_local_root(self, path: Path) -> Path:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SaveSyncLocalStorageError(
                f"Cannot create local directory {path}: {e}"
            ) from e
        if not path.is_dir():
            raise SaveSyncLocalStorageError(f"Local root is not a directory: {path}")
        return path

    def _map_external(self, relative_path: str, result: SyncResult):
        try:
            mapped = from_external_path(relative_path)
        except SaveSyncFileError as e:
            self._record_skip(result, relative_path, e)
            return None
        if mapped is None:
            logger.debug("Ignoring file outside sync namespaces: %s", relative_path)
        return mapped

    def _run_file(
        self,
        result: SyncResult,
        relative_path: str,
        copy: Callable[[], int],
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        """Copy a single file, recording per-file failures and continuing."""
        if self.cancel_event.is_set():
            raise SaveSyncCancelledError(f"Sync cancelled before {relative_path}")
        self._set_phase(SyncPhase.COPYING)
        try:
            copied = copy()
        except SaveSyncFileError as e:
            self._record_skip(result, relative_path, e)
        else:
            result.copied += 1
            result.bytes_copied += copied
            logger.debug("Copied %s (%d bytes)", relative_path, copied)
            if progress_callback:
                progress_callback(relative_path, copied)
        self._set_phase(SyncPhase.WALKING)

    def _record_skip(
        self, result: SyncResult, relative_path: str, error: SaveSyncFileError
    ) -> None:
        if isinstance(error, SaveSyncConflictError):
            result.conflicts += 1
        result.skipped += 1
        result.skipped_paths.append(relative_path)
        logger.warning("Skipping %s: %s", relative_path, error)

    def _finish(self, result: SyncResult, start_time: float) -> None:
        self._set_phase(SyncPhase.DONE)
        logger.debug(
            "%s finished in %.2fs: %d copied, %d skipped",
            result.direction.value,
            time.time() - start_time,
            result.copied,
            result.skipped,
        )


class BackgroundSyncRunner:
    """Runs sync passes off the caller's thread, one at a time.

    Passes are executed in submission order on a single worker thread, so
    Push and Pull never overlap.

    Examples:
        >>> with BackgroundSyncRunner(engine) as runner:
        ...     future = runner.submit_in(settings)
        ...     result = future.result()
    """

    def __init__(self, engine: SyncEngine):
        self.engine = engine
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="pysavesync"
        )
        self._pending: set = set()
        self._lock = threading.Lock()

    def submit(
        self,
        direction: SyncDirection,
        settings: SyncSettings,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> "Future[SyncResult]":
        future = self._executor.submit(
            self.engine.sync, direction, settings, progress_callback
        )
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: "Future[SyncResult]") -> None:
        with self._lock:
            self._pending.discard(future)

    def submit_out(
        self,
        settings: SyncSettings,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> "Future[SyncResult]":
        return self.submit(SyncDirection.PUSH, settings, progress_callback)

    def submit_in(
        self,
        settings: SyncSettings,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> "Future[SyncResult]":
        return self.submit(SyncDirection.PULL, settings, progress_callback)

    def cancel(self) -> None:
        """Abort the in-flight pass and drop queued ones.

        The runner stays usable: passes submitted afterwards run normally.
        """
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            future.cancel()
        self.engine.cancel()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundSyncRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
