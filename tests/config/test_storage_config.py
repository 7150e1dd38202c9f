from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from miniorm.config import (
    MissingConfigurationError,
    StorageConfig,
    get_database_config,
    get_storage_config,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_storage_config_uses_env_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MINIORM_DATA_DIR", str(tmp_path / "data"))

    config = get_storage_config()

    assert config.data_dir == tmp_path / "data"
    assert config.database_file == (tmp_path / "data" / "miniorm.db").resolve()


def test_storage_config_defaults_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("MINIORM_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    config = get_storage_config()

    assert config.data_dir == tmp_path / "miniorm"


def test_sqlite_uri_creates_directory(tmp_path: Path) -> None:
    config = StorageConfig(data_dir=tmp_path / "nested" / "dir")

    uri = config.sqlite_uri()

    path = (tmp_path / "nested" / "dir" / "miniorm.db").resolve()
    assert uri == f"sqlite+pysqlite:///{path}"
    assert path.parent.is_dir()


def test_database_config_prefers_explicit_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MINIORM_DATABASE_URI", "postgresql+psycopg://localhost/hr")
    monkeypatch.setenv("MINIORM_ECHO_SQL", "true")

    config = get_database_config()

    assert config.uri == "postgresql+psycopg://localhost/hr"
    assert config.echo is True


def test_database_config_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("MINIORM_DATABASE_URI", raising=False)
    monkeypatch.delenv("MINIORM_ECHO_SQL", raising=False)

    config = get_database_config(storage=StorageConfig(data_dir=tmp_path))

    assert config.uri == f"sqlite+pysqlite:///{(tmp_path / 'miniorm.db').resolve()}"
    assert config.echo is False


def test_database_config_can_require_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MINIORM_DATABASE_URI", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_database_config(require_uri=True)
