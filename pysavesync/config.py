"""Configuration management for pysavesync.

Settings are read from a simple ``KEY=value`` file stored in
``~/.config/pysavesync/config``. Environment variables take precedence
over values from the file.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import SaveSyncConfigError

logger = logging.getLogger(__name__)

SAVE_STORAGE_FOLDER_KEY = "SAVE_STORAGE_FOLDER"
EXTERNAL_FOLDER_KEY = "EXTERNAL_FOLDER"
DATA_DIR_KEY = "DATA_DIR"

ENV_PREFIX = "PYSAVESYNC_"


class Config:
    """Reads and writes pysavesync settings."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file. Defaults to
                ``$PYSAVESYNC_CONFIG_DIR`` or ``~/.config/pysavesync``.
        """
        if config_dir is None:
            env_dir = os.environ.get(f"{ENV_PREFIX}CONFIG_DIR")
            if env_dir:
                config_dir = Path(env_dir)
            else:
                config_dir = Path.home() / ".config" / "pysavesync"
        self.config_dir = config_dir
        self.config_file = self.config_dir / "config"

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_file

    def _read_file(self) -> dict[str, str]:
        values: dict[str, str] = {}
        if not self.config_file.exists():
            return values

        try:
            content = self.config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise SaveSyncConfigError(
                f"Cannot read config file {self.config_file}: {e}"
            ) from e

        for line_no, raw_line in enumerate(content.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                raise SaveSyncConfigError(
                    f"Malformed line {line_no} in {self.config_file}: {raw_line!r}"
                )
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip()
        return values

    def _write_value(self, key: str, value: Optional[str]) -> None:
        values = self._read_file()
        if value:
            values[key] = value
        else:
            values.pop(key, None)

        self.config_dir.mkdir(parents=True, exist_ok=True)
        lines = [f"{k}={v}" for k, v in sorted(values.items())]
        self.config_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.debug("Updated %s in %s", key, self.config_file)

    def _get(self, key: str) -> Optional[str]:
        env_value = os.environ.get(f"{ENV_PREFIX}{key}")
        if env_value is not None:
            return env_value or None
        return self._read_file().get(key) or None

    def get_save_storage_folder(self) -> Optional[str]:
        """Return the external folder reference, or None if unset."""
        return self._get(SAVE_STORAGE_FOLDER_KEY)

    def save_save_storage_folder(self, reference: str) -> None:
        """Persist the external folder reference."""
        if not reference.strip():
            raise SaveSyncConfigError("External folder reference cannot be empty")
        self._write_value(SAVE_STORAGE_FOLDER_KEY, reference.strip())

    def clear_save_storage_folder(self) -> None:
        """Remove the external folder reference (disables sync)."""
        self._write_value(SAVE_STORAGE_FOLDER_KEY, None)

    def get_external_folder(self) -> Optional[str]:
        """Return the local scan (ROM library) directory, or None if unset."""
        return self._get(EXTERNAL_FOLDER_KEY)

    def save_external_folder(self, folder: str) -> None:
        """Persist the local scan directory."""
        self._write_value(EXTERNAL_FOLDER_KEY, folder)

    def get_data_dir(self) -> Path:
        """Return the base application storage area."""
        value = self._get(DATA_DIR_KEY)
        if value:
            return Path(value).expanduser()
        return Path.home() / ".local" / "share" / "pysavesync"

    def is_configured(self) -> bool:
        """Return True if an external folder is configured."""
        return self.get_save_storage_folder() is not None


config = Config()
