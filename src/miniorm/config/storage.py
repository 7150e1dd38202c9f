"""Database location: an explicit URI, or a SQLite file in the user's data directory."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import require_env_var

APP_DIR_NAME: Final[str] = "miniorm"
DEFAULT_DB_FILENAME: Final[str] = "miniorm.db"
DATA_DIR_ENV: Final[str] = "MINIORM_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "MINIORM_DATABASE_URI"
ECHO_SQL_ENV: Final[str] = "MINIORM_ECHO_SQL"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Directory holding the fallback SQLite database."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_file(self) -> Path:
        return self.data_dir.expanduser().resolve() / self.database_filename

    def sqlite_uri(self, *, create_dir: bool = True) -> str:
        path = self.database_file
        if create_dir:
            path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def platform_data_home() -> Path:
    if sys.platform == "win32":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    override = os.getenv(DATA_DIR_ENV, "").strip()
    data_dir = Path(override) if override else platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(
    *,
    storage: StorageConfig | None = None,
    require_uri: bool = False,
) -> DatabaseConfig:
    """Resolve the database URI.

    ``MINIORM_DATABASE_URI`` wins when set. Otherwise the URI points at a SQLite
    file inside the data directory, unless ``require_uri`` demands the variable.
    """

    echo = os.getenv(ECHO_SQL_ENV, "").strip().lower() in {"1", "true", "yes"}
    if require_uri:
        return DatabaseConfig(uri=require_env_var(DATABASE_URI_ENV), echo=echo)
    uri = os.getenv(DATABASE_URI_ENV, "").strip()
    if not uri:
        uri = (storage or get_storage_config()).sqlite_uri()
    return DatabaseConfig(uri=uri, echo=echo)
