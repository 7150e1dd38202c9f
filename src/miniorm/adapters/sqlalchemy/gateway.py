"""Storage gateway backed by SQLAlchemy Core."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from miniorm.adapters.sqlalchemy.tables import TableCatalog
from miniorm.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
)
from miniorm.domain.errors import InvalidOperationError, StorageOperationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement, Table
    from sqlalchemy.engine import Connection, Engine

    from miniorm.domain.model import EntityShape

log = logging.getLogger(__name__)


class SqlAlchemyStorageGateway:
    """Reads whole tables and writes record batches through one connection.

    Only columns present in the reflected table are read or written, so entity
    fields without a backing column keep their dataclass defaults.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        resolved = engine or configured_engine()
        if resolved is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call miniorm.adapters.sqlalchemy."
                "startup() or pass an engine."
            )
        self._engine = resolved
        self._catalog = TableCatalog()
        self._unit_of_work: SqlAlchemyUnitOfWork | None = None

    @property
    def engine(self) -> Engine:
        return self._engine

    def begin_transaction(self) -> SqlAlchemyUnitOfWork:
        if self._unit_of_work is not None and self._unit_of_work.is_active:
            raise InvalidOperationError("A transaction is already open on this gateway")
        self._unit_of_work = SqlAlchemyUnitOfWork(self._engine)
        return self._unit_of_work

    def fetch_all[T](self, shape: EntityShape[T]) -> list[T]:
        try:
            with self._engine.connect() as connection:
                table = self._catalog.table_for(shape, connection)
                fields = self._catalog.mapped_fields(shape, table)
                stmt = select(*(table.c[scalar.column] for scalar in fields)).order_by(
                    *table.primary_key.columns
                )
                rows = connection.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise StorageOperationError(f"Could not load table {shape.table_name}") from exc
        return [shape.from_columns(row) for row in rows]

    def insert_batch[T](self, shape: EntityShape[T], records: Sequence[T]) -> None:
        connection = self._connection()
        try:
            table = self._catalog.table_for(shape, connection)
            fields = self._catalog.mapped_fields(shape, table)
            if all(None not in shape.key_of(record) for record in records):
                connection.execute(
                    table.insert(), [shape.to_columns(record, fields) for record in records]
                )
                return
            for record in records:
                self._insert_generating_key(connection, table, shape, record)
        except SQLAlchemyError as exc:
            raise StorageOperationError(f"Insert into {shape.table_name} failed") from exc
        log.debug("Inserted %d rows into %s", len(records), shape.table_name)

    def update_batch[T](self, shape: EntityShape[T], records: Sequence[T]) -> None:
        connection = self._connection()
        key_columns = {scalar.column for scalar in shape.key_fields}
        try:
            table = self._catalog.table_for(shape, connection)
            fields = self._catalog.mapped_fields(shape, table)
            for record in records:
                values = {
                    column: value
                    for column, value in shape.to_columns(record, fields).items()
                    if column not in key_columns
                }
                if not values:
                    continue
                stmt = table.update().where(*_key_clause(table, shape, record)).values(values)
                result = connection.execute(stmt)
                _expect_one_row(result.rowcount, "update", shape, record)
        except SQLAlchemyError as exc:
            raise StorageOperationError(f"Update of {shape.table_name} failed") from exc
        log.debug("Updated %d rows in %s", len(records), shape.table_name)

    def delete_batch[T](self, shape: EntityShape[T], records: Sequence[T]) -> None:
        connection = self._connection()
        try:
            table = self._catalog.table_for(shape, connection)
            for record in records:
                result = connection.execute(
                    table.delete().where(*_key_clause(table, shape, record))
                )
                _expect_one_row(result.rowcount, "delete", shape, record)
        except SQLAlchemyError as exc:
            raise StorageOperationError(f"Delete from {shape.table_name} failed") from exc
        log.debug("Deleted %d rows from %s", len(records), shape.table_name)

    def column_names(self, shape: EntityShape[object]) -> tuple[str, ...]:
        try:
            with self._engine.connect() as connection:
                return self._catalog.column_names(shape, connection)
        except SQLAlchemyError as exc:
            raise StorageOperationError(f"Could not inspect table {shape.table_name}") from exc

    def _connection(self) -> Connection:
        if self._unit_of_work is None or not self._unit_of_work.is_active:
            raise InvalidOperationError("No open transaction; call begin_transaction() first")
        return self._unit_of_work.connection

    def _insert_generating_key[T](
        self, connection: Connection, table: Table, shape: EntityShape[T], record: T
    ) -> None:
        key_columns = {scalar.column for scalar in shape.key_fields}
        values = {
            column: value
            for column, value in shape.to_columns(
                record, self._catalog.mapped_fields(shape, table)
            ).items()
            if not (column in key_columns and value is None)
        }
        result = connection.execute(table.insert().values(values))
        generated = result.inserted_primary_key
        if generated is None:
            return
        field_by_column = {scalar.column: scalar.name for scalar in shape.key_fields}
        for column, value in zip(table.primary_key.columns, generated, strict=True):
            name = field_by_column.get(column.name)
            if name is not None and value is not None:
                setattr(record, name, value)


def _key_clause[T](table: Table, shape: EntityShape[T], record: T) -> list[ColumnElement[bool]]:
    return [table.c[scalar.column] == getattr(record, scalar.name) for scalar in shape.key_fields]


def _expect_one_row[T](rowcount: Any, operation: str, shape: EntityShape[T], record: T) -> None:
    if rowcount != 1:
        raise InvalidOperationError(
            f"Expected {operation} of one {shape.table_name} row with key "
            f"{shape.key_of(record)!r}, affected {rowcount}"
        )
