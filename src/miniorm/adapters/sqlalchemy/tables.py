"""Table reflection and table definitions for registered entity shapes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)

from miniorm.domain.model import ScalarKind

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.types import TypeEngine

    from miniorm.domain.model import EntityShape, Model, ScalarField

log = logging.getLogger(__name__)

# SQLite only auto-increments INTEGER PRIMARY KEY columns.
_BIG_INTEGER: Final = BigInteger().with_variant(Integer(), "sqlite")


class TableCatalog:
    """Reflected tables keyed by name; the column introspection layer."""

    def __init__(self) -> None:
        self._metadata = MetaData()
        self._tables: dict[str, Table] = {}

    def table_for(self, shape: EntityShape[object], bind: Connection | Engine) -> Table:
        table = self._tables.get(shape.table_name)
        if table is None:
            table = Table(
                shape.table_name, self._metadata, autoload_with=bind, resolve_fks=False
            )
            self._tables[shape.table_name] = table
            log.debug("Reflected table %s: %s", table.name, ", ".join(table.c.keys()))
        return table

    def column_names(self, shape: EntityShape[object], bind: Connection | Engine) -> tuple[str, ...]:
        return tuple(self.table_for(shape, bind).c.keys())

    @staticmethod
    def mapped_fields(shape: EntityShape[object], table: Table) -> tuple[ScalarField, ...]:
        """Scalar fields of ``shape`` that exist as columns of ``table``."""

        return tuple(scalar for scalar in shape.scalars if scalar.column in table.c)


def _column_type(scalar: ScalarField) -> TypeEngine[object]:
    options = scalar.options
    match scalar.kind:
        case ScalarKind.TEXT:
            return String(options.max_length)
        case ScalarKind.INT32:
            return Integer()
        case ScalarKind.UINT32 | ScalarKind.INT64 | ScalarKind.UINT64:
            return _BIG_INTEGER
        case ScalarKind.DECIMAL:
            return Numeric(options.max_digits or 18, options.decimal_places or 2, asdecimal=True)
        case ScalarKind.BOOLEAN:
            return Boolean()
        case ScalarKind.TIMESTAMP:
            return DateTime()


def build_metadata(model: Model) -> MetaData:
    """Return table definitions matching the registered shapes of ``model``."""

    metadata = MetaData()
    for shape in model.shapes():
        single_key = len(shape.key_fields) == 1
        columns: list[Column[object]] = []
        for scalar in shape.scalars:
            foreign_key = shape.foreign_key_for(scalar.name)
            constraints: list[ForeignKey] = []
            if foreign_key is not None:
                target = model.shape_for(foreign_key.target)
                target_key = target.key_fields[0]
                constraints.append(ForeignKey(f"{target.table_name}.{target_key.column}"))
            columns.append(
                Column(
                    scalar.column,
                    _column_type(scalar),
                    *constraints,
                    primary_key=scalar.is_key,
                    autoincrement=scalar.is_key and single_key and scalar.python_type is int,
                    nullable=scalar.nullable and not scalar.is_key,
                )
            )
        Table(shape.table_name, metadata, *columns)
    return metadata


def create_all_tables(model: Model, engine: Engine) -> MetaData:
    metadata = build_metadata(model)
    metadata.create_all(engine)
    return metadata
