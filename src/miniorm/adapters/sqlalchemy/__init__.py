"""SQLAlchemy adapter package for miniorm."""

from __future__ import annotations

from .gateway import SqlAlchemyStorageGateway
from .tables import TableCatalog, build_metadata, create_all_tables
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyStorageGateway",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "TableCatalog",
    "build_metadata",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "shutdown",
    "startup",
]
