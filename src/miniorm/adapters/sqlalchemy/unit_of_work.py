"""Engine lifecycle and the SQLAlchemy-backed transaction handle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from miniorm.config import get_database_config
from miniorm.domain.errors import InvalidOperationError, MiniOrmError, StorageOperationError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine, RootTransaction


class StartupError(MiniOrmError):
    """Raised when the SQLAlchemy adapter is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Initialise the engine shared by gateways created without an explicit one."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        config = get_database_config()
        engine = create_engine(database_uri or config.uri, echo=config.echo, future=True)
    _STATE.engine = engine
    return engine


def configured_engine() -> Engine | None:
    """Engine used by gateways constructed without one, if started."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the shared engine; later gateways need a new ``startup()``."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyUnitOfWork:
    """One connection with one open transaction; implements ``TransactionHandle``."""

    def __init__(self, engine: Engine) -> None:
        try:
            self._connection: Connection | None = engine.connect()
            self._transaction: RootTransaction = self._connection.begin()
        except SQLAlchemyError as exc:
            raise StorageOperationError("Could not open a transaction") from exc

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.close()
        return False

    @property
    def is_active(self) -> bool:
        return self._connection is not None and self._transaction.is_active

    @property
    def connection(self) -> Connection:
        if self._connection is None or not self._transaction.is_active:
            raise InvalidOperationError("Transaction is no longer active")
        return self._connection

    def commit(self) -> None:
        try:
            self._transaction.commit()
        except SQLAlchemyError as exc:
            raise StorageOperationError("Commit failed") from exc

    def rollback(self) -> None:
        if not self._transaction.is_active:
            return
        try:
            self._transaction.rollback()
        except SQLAlchemyError as exc:
            raise StorageOperationError("Rollback failed") from exc

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
