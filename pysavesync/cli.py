"""CLI interface for pysavesync."""

import logging
from typing import Any, Optional

import click
from rich.progress import Progress, SpinnerColumn, TextColumn

from .config import config
from .directories import DirectoriesManager, LocalRoot
from .exceptions import SaveSyncAccessError, SaveSyncError
from .manager import SaveStorageManager
from .output import OutputFormatter
from .storage import AccessMode, DirectoryStorage
from .sync import SyncDirection, SyncResult
from .utils import format_size

logger = logging.getLogger(__name__)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pysavesync")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """PySaveSync - Mirror emulator saves and states with an external folder."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pysavesync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("folder", type=str)
@click.option(
    "--scan-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Local directory scanned for ROMs",
)
@click.pass_context
def init(ctx: Any, folder: str, scan_dir: Optional[str]) -> None:
    """Configure the external folder used for syncing saves and states.

    FOLDER may be a plain path or a file:// URI.
    """
    out: OutputFormatter = ctx.obj["out"]

    storage = DirectoryStorage()
    try:
        storage.acquire_access(folder, AccessMode.READ_WRITE)
    except SaveSyncAccessError as e:
        out.error(f"Cannot use folder: {e}")
        if not click.confirm("Save folder anyway?", default=False):
            out.warning("Configuration cancelled.")
            ctx.exit(1)

    try:
        config.save_save_storage_folder(folder)
        if scan_dir:
            config.save_external_folder(scan_dir)
    except (SaveSyncError, OSError) as e:
        out.error(f"Cannot save configuration: {e}")
        ctx.exit(1)

    out.print_summary(
        "Initialization Complete",
        [
            ("Status", "✓ Configuration saved successfully"),
            ("External folder", folder),
            ("Config file", str(config.get_config_path())),
        ],
    )


@main.command()
@click.pass_context
def reset(ctx: Any) -> None:
    """Forget the configured external folder (disables syncing)."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        config.clear_save_storage_folder()
    except (SaveSyncError, OSError) as e:
        out.error(f"Cannot update configuration: {e}")
        ctx.exit(1)
    out.success("✓ External folder cleared")


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show sync configuration and whether syncing is available."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        manager = SaveStorageManager.from_config(config)
        folder = config.get_save_storage_folder()
        scan_dir = config.get_external_folder()
    except SaveSyncError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    out.print_summary(
        "Save Sync Status",
        [
            ("External folder", folder or "(not configured)"),
            ("Scan directory", scan_dir or "(not configured)"),
            ("Data directory", str(manager.directories.data_dir)),
            ("Sync supported", manager.is_supported()),
        ],
    )


@main.command()
@click.pass_context
def dirs(ctx: Any) -> None:
    """List local storage directories (creating missing ones)."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        directories = DirectoriesManager(config.get_data_dir())
        rows = [
            (kind.name.lower(), str(directories.resolve_local_root(kind)))
            for kind in LocalRoot
        ]
    except SaveSyncError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    out.print_summary("Local Directories", rows)


def _run_sync(ctx: Any, direction: SyncDirection, chunk_size: int) -> None:
    """Run one sync pass and report the outcome."""
    out: OutputFormatter = ctx.obj["out"]

    if chunk_size < 1:
        out.error("Chunk size must be at least 1 KB")
        ctx.exit(1)

    manager: Optional[SaveStorageManager] = None
    try:
        manager = SaveStorageManager.from_config(config, chunk_size=chunk_size * 1024)
        settings = manager.settings()
        if not settings.enabled:
            out.info("No external folder configured, nothing to sync.")
            out.info("Run 'pysavesync init FOLDER' to enable syncing")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=out.quiet or out.json_output,
        ) as progress:
            task = progress.add_task(f"Running {direction.value}...", total=None)

            def on_file(relative_path: str, copied: int) -> None:
                progress.update(task, description=f"Copied {relative_path}")

            result = manager.engine.sync(direction, settings, on_file)

    except KeyboardInterrupt:
        if manager is not None:
            manager.engine.cancel()
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
        return
    except SaveSyncAccessError as e:
        out.error(f"Sync failed: could not access folder: {e}")
        ctx.exit(1)
        return
    except SaveSyncError as e:
        out.error(f"Sync failed: {e}")
        ctx.exit(1)
        return

    _display_summary(out, result)


def _display_summary(out: OutputFormatter, result: SyncResult) -> None:
    if out.json_output:
        out.output_json(result.to_dict())
        return
    if result.disabled:
        return

    out.print_summary(
        f"Sync {result.direction.value} complete",
        [
            ("Copied", result.copied),
            ("Skipped", result.skipped),
            ("Conflicts", result.conflicts),
            ("Transferred", format_size(result.bytes_copied)),
        ],
    )
    if result.skipped:
        out.warning(f"⚠  {result.skipped} file(s) were skipped:")
        for path in result.skipped_paths:
            out.warning(f"  • {path}")


@main.command()
@click.option(
    "--chunk-size",
    "-c",
    type=int,
    default=1024,
    help="Chunk size in KB for streamed copies (default: 1024KB)",
)
@click.pass_context
def push(ctx: Any, chunk_size: int) -> None:
    """Copy local saves and states to the external folder (sync out)."""
    _run_sync(ctx, SyncDirection.PUSH, chunk_size)


@main.command()
@click.option(
    "--chunk-size",
    "-c",
    type=int,
    default=1024,
    help="Chunk size in KB for streamed copies (default: 1024KB)",
)
@click.pass_context
def pull(ctx: Any, chunk_size: int) -> None:
    """Copy saves and states from the external folder to local storage (sync in)."""
    _run_sync(ctx, SyncDirection.PULL, chunk_size)


if __name__ == "__main__":
    main()
