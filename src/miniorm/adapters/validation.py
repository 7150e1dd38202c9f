"""Validators evaluating declared field constraints with pydantic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from miniorm.domain.model import ScalarKind

if TYPE_CHECKING:
    from miniorm.domain.model import EntityShape, ScalarField
    from miniorm.domain.ports import SchemaMetadataProvider

log = logging.getLogger(__name__)

_INTEGER_BOUNDS: Final[dict[ScalarKind, tuple[int, int]]] = {
    ScalarKind.INT32: (-(2**31), 2**31 - 1),
    ScalarKind.UINT32: (0, 2**32 - 1),
    ScalarKind.INT64: (-(2**63), 2**63 - 1),
    ScalarKind.UINT64: (0, 2**64 - 1),
}

_SCHEMA_CONFIG: Final = ConfigDict(strict=True, extra="forbid", protected_namespaces=())


class AcceptAllValidator:
    """Treats every record as valid."""

    def is_valid(self, record: object) -> bool:
        _ = record
        return True


class PydanticValidator:
    """Validates persistable fields against a pydantic model derived from each shape.

    Values must match their annotated type exactly (strict mode); declared
    constraints and integer widths become pydantic field constraints.
    """

    def __init__(self, metadata: SchemaMetadataProvider) -> None:
        self._metadata = metadata
        self._schemas: dict[type, type[BaseModel]] = {}

    def is_valid(self, record: object) -> bool:
        shape = self._metadata.shape_for(type(record))
        schema = self.schema_for(shape)
        try:
            schema.model_validate(shape.project(record))
        except ValidationError as exc:
            log.debug(
                "%s %r failed validation: %s",
                shape.name,
                shape.key_of(record),
                exc.errors(include_url=False),
            )
            return False
        return True

    def schema_for(self, shape: EntityShape[Any]) -> type[BaseModel]:
        schema = self._schemas.get(shape.entity_cls)
        if schema is None:
            definitions: dict[str, Any] = {
                scalar.name: _field_definition(scalar) for scalar in shape.scalars
            }
            schema = create_model(
                f"{shape.name}Schema",
                __config__=_SCHEMA_CONFIG,
                **definitions,
            )
            self._schemas[shape.entity_cls] = schema
        return schema


def _field_definition(scalar: ScalarField) -> tuple[Any, Any]:
    options = scalar.options
    annotation: Any = scalar.python_type | None if scalar.nullable else scalar.python_type

    ge, le = options.ge, options.le
    bounds = _INTEGER_BOUNDS.get(scalar.kind)
    if bounds is not None:
        lower, upper = bounds
        ge = lower if ge is None else max(ge, lower)
        le = upper if le is None else min(le, upper)

    return annotation, Field(
        ...,
        ge=ge,
        le=le,
        max_length=options.max_length,
        min_length=options.min_length,
        pattern=options.pattern,
        max_digits=options.max_digits,
        decimal_places=options.decimal_places,
    )
