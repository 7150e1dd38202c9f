"""Declarative field markers for entity dataclasses.

Entity classes are plain ``@dataclass`` types. Each field is tagged through
``dataclasses.field(metadata=...)`` using the helpers below; the tag is read once
when the class is registered with a ``Model``.
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any, Final

FIELD_OPTIONS_KEY: Final[str] = "miniorm"


class ScalarKind(StrEnum):
    TEXT = "text"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"


class FieldRole(StrEnum):
    SCALAR = "scalar"
    KEY = "key"
    FOREIGN_KEY = "foreign_key"
    REFERENCE = "reference"
    COLLECTION = "collection"
    NOT_MAPPED = "not_mapped"


# Shared by shape building, cloning, comparison and column filtering.
ALLOWED_SCALAR_TYPES: Final[frozenset[type]] = frozenset({str, int, Decimal, bool, datetime})

PYTHON_TYPE_BY_KIND: Final[dict[ScalarKind, type]] = {
    ScalarKind.TEXT: str,
    ScalarKind.INT32: int,
    ScalarKind.UINT32: int,
    ScalarKind.INT64: int,
    ScalarKind.UINT64: int,
    ScalarKind.DECIMAL: Decimal,
    ScalarKind.BOOLEAN: bool,
    ScalarKind.TIMESTAMP: datetime,
}

DEFAULT_KIND_BY_TYPE: Final[dict[type, ScalarKind]] = {
    str: ScalarKind.TEXT,
    int: ScalarKind.INT64,
    Decimal: ScalarKind.DECIMAL,
    bool: ScalarKind.BOOLEAN,
    datetime: ScalarKind.TIMESTAMP,
}


@dataclass(frozen=True, slots=True)
class FieldOptions:
    """Mapping information attached to one dataclass field."""

    role: FieldRole
    column: str | None = None
    kind: ScalarKind | None = None
    navigation: str | None = None
    via: str | None = None

    # constraints evaluated by validators
    max_length: int | None = None
    min_length: int | None = None
    pattern: str | None = None
    ge: int | Decimal | None = None
    le: int | Decimal | None = None
    max_digits: int | None = None
    decimal_places: int | None = None

    @property
    def is_navigation(self) -> bool:
        return self.role in (FieldRole.REFERENCE, FieldRole.COLLECTION)

    @property
    def is_persistable(self) -> bool:
        return self.role in (FieldRole.SCALAR, FieldRole.KEY, FieldRole.FOREIGN_KEY)


def _tagged(options: FieldOptions, *, default: Any, default_factory: Any, repr_: bool) -> Any:
    return field(
        default=default,
        default_factory=default_factory,
        repr=repr_,
        metadata={FIELD_OPTIONS_KEY: options},
    )


def scalar(
    *,
    default: Any = MISSING,
    column: str | None = None,
    kind: ScalarKind | None = None,
    max_length: int | None = None,
    min_length: int | None = None,
    pattern: str | None = None,
    ge: int | Decimal | None = None,
    le: int | Decimal | None = None,
    max_digits: int | None = None,
    decimal_places: int | None = None,
) -> Any:
    """Declare a persistable column."""

    options = FieldOptions(
        role=FieldRole.SCALAR,
        column=column,
        kind=kind,
        max_length=max_length,
        min_length=min_length,
        pattern=pattern,
        ge=ge,
        le=le,
        max_digits=max_digits,
        decimal_places=decimal_places,
    )
    return _tagged(options, default=default, default_factory=MISSING, repr_=True)


def key(
    *,
    default: Any = MISSING,
    column: str | None = None,
    kind: ScalarKind | None = None,
    references: str | None = None,
    max_length: int | None = None,
    ge: int | None = None,
) -> Any:
    """Declare a primary-key column.

    ``references`` names a reference field on the same class and makes the key
    double as a foreign key, which is how join records are declared.
    """

    options = FieldOptions(
        role=FieldRole.KEY,
        column=column,
        kind=kind,
        navigation=references,
        max_length=max_length,
        ge=ge,
    )
    return _tagged(options, default=default, default_factory=MISSING, repr_=True)


def foreign_key(
    navigation: str,
    *,
    default: Any = MISSING,
    column: str | None = None,
    kind: ScalarKind | None = None,
) -> Any:
    """Declare a foreign-key column resolved into the reference field ``navigation``."""

    options = FieldOptions(
        role=FieldRole.FOREIGN_KEY,
        column=column,
        kind=kind,
        navigation=navigation,
    )
    return _tagged(options, default=default, default_factory=MISSING, repr_=True)


def reference() -> Any:
    """Declare a single-valued navigation field. Never persisted."""

    return _tagged(
        FieldOptions(role=FieldRole.REFERENCE),
        default=None,
        default_factory=MISSING,
        repr_=False,
    )


def collection(*, via: str | None = None) -> Any:
    """Declare a multi-valued navigation field annotated as ``list[Element]``.

    ``via`` pins the element field joined against the owner's key; without it the
    join field is inferred from the element type's keys and foreign keys.
    """

    return _tagged(
        FieldOptions(role=FieldRole.COLLECTION, via=via),
        default=MISSING,
        default_factory=list,
        repr_=False,
    )


def not_mapped(*, default: Any = None) -> Any:
    """Declare an attribute that is never cloned, compared or stored."""

    return _tagged(
        FieldOptions(role=FieldRole.NOT_MAPPED),
        default=default,
        default_factory=MISSING,
        repr_=False,
    )
