"""Configuration management for gdrivesync.

Settings are resolved from the process environment first, then from a
``.env`` file in the working directory, then from the user config file
at ``~/.config/gdrivesync/config``. Both files use dotenv syntax.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values, set_key

from .utils import DEFAULT_REDIRECT_PORT

logger = logging.getLogger(__name__)

# Canonical setting name -> accepted environment variable names
_ALIASES: dict[str, tuple[str, ...]] = {
    "GDRIVE_API_KEY": ("GDRIVE_API_KEY", "API_KEY"),
    "GDRIVE_CLIENT_ID": ("GDRIVE_CLIENT_ID", "CLIENT_ID"),
    "GDRIVE_CLIENT_SECRET": ("GDRIVE_CLIENT_SECRET", "CLIENT_SECRET"),
    "GDRIVE_FOLDER_ID": ("GDRIVE_FOLDER_ID", "FOLDER_ID"),
    "SYNC_PATH": ("SYNC_PATH",),
    "GDRIVE_TOKEN_FILE": ("GDRIVE_TOKEN_FILE", "TOKEN_FILE"),
    "GDRIVE_REDIRECT_PORT": ("GDRIVE_REDIRECT_PORT",),
}


class Config:
    """Resolved gdrivesync settings."""

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        dotenv_path: Optional[Path] = None,
    ):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the user config file
                (default: ~/.config/gdrivesync)
            dotenv_path: Project ``.env`` file (default: ./.env)
        """
        self.config_dir = config_dir or Path.home() / ".config" / "gdrivesync"
        self.dotenv_path = dotenv_path or Path.cwd() / ".env"
        self._file_values: dict[str, Optional[str]] = {}
        self.reload()

    def reload(self) -> None:
        """Re-read both dotenv files."""
        values: dict[str, Optional[str]] = {}
        config_path = self.get_config_path()
        if config_path.exists():
            values.update(dotenv_values(config_path))
        if self.dotenv_path.exists():
            values.update(dotenv_values(self.dotenv_path))
        self._file_values = values

    def get_config_path(self) -> Path:
        """Path of the user config file."""
        return self.config_dir / "config"

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a setting by its canonical name."""
        names = _ALIASES.get(name, (name,))
        for env_name in names:
            value = os.environ.get(env_name)
            if value:
                return value
        for env_name in names:
            value = self._file_values.get(env_name)
            if value:
                return value
        return default

    @property
    def api_key(self) -> Optional[str]:
        return self.get("GDRIVE_API_KEY")

    @property
    def client_id(self) -> Optional[str]:
        return self.get("GDRIVE_CLIENT_ID")

    @property
    def client_secret(self) -> Optional[str]:
        return self.get("GDRIVE_CLIENT_SECRET")

    @property
    def folder_id(self) -> Optional[str]:
        return self.get("GDRIVE_FOLDER_ID")

    @property
    def sync_path(self) -> Optional[str]:
        return self.get("SYNC_PATH")

    @property
    def token_file(self) -> Path:
        value = self.get("GDRIVE_TOKEN_FILE")
        if value:
            return Path(value).expanduser()
        return self.config_dir / "token.json"

    @property
    def redirect_port(self) -> int:
        value = self.get("GDRIVE_REDIRECT_PORT")
        if not value:
            return DEFAULT_REDIRECT_PORT
        try:
            return int(value)
        except ValueError:
            logger.warning(
                f"Invalid GDRIVE_REDIRECT_PORT {value!r}, "
                f"using {DEFAULT_REDIRECT_PORT}"
            )
            return DEFAULT_REDIRECT_PORT

    def has_oauth_client(self) -> bool:
        """Whether both OAuth client id and secret are available."""
        return bool(self.client_id and self.client_secret)

    def is_configured(self) -> bool:
        """Whether any usable credential is available."""
        return self.has_oauth_client() or bool(self.api_key)

    def save_settings(self, **values: Optional[str]) -> Path:
        """Persist settings to the user config file.

        Keyword names are canonical setting names; ``None`` values are
        skipped.

        Returns:
            Path of the written config file
        """
        config_path = self.get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        if not config_path.exists():
            config_path.touch(mode=0o600)

        for name, value in values.items():
            if value is None:
                continue
            set_key(str(config_path), name, str(value), quote_mode="never")
            logger.debug(f"Saved {name} to {config_path}")

        self.reload()
        return config_path


@dataclass
class SyncSettings:
    """Parameters of a single sync run, resolved once at startup."""

    local_path: Path
    """Local directory to upload"""

    folder_id: str
    """Destination Drive folder ID"""

    workers: int = 0
    """Maximum parallel uploads; 0 starts one worker per file"""

    dry_run: bool = False
    """Only show what would be uploaded"""

    exclude_patterns: list[str] = field(default_factory=list)
    """Glob patterns of local paths to skip"""

    exclude_dot_files: bool = False
    """Skip files and directories whose name starts with a dot"""


config = Config()
