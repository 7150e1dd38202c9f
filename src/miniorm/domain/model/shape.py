"""Per-entity record shapes.

An ``EntityShape`` is built once per entity class and answers every question the
engine asks about a record: which fields are persistable, which form the key,
which are foreign keys, and how to clone, project and compare instances.
"""

from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin, get_type_hints

from miniorm.domain.errors import MappingConfigurationError
from miniorm.domain.model.fields import (
    DEFAULT_KIND_BY_TYPE,
    FIELD_OPTIONS_KEY,
    PYTHON_TYPE_BY_KIND,
    FieldOptions,
    FieldRole,
    ScalarKind,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True, slots=True)
class ScalarField:
    name: str
    column: str
    python_type: type
    kind: ScalarKind
    nullable: bool
    is_key: bool
    options: FieldOptions


@dataclass(frozen=True, slots=True)
class ForeignKeyField:
    name: str
    navigation: str
    target: type


@dataclass(frozen=True, slots=True)
class NavigationField:
    name: str
    target: type
    many: bool
    via: str | None = None


@dataclass(frozen=True, slots=True)
class EntityShape[T]:
    """Field layout of one entity type."""

    entity_cls: type[T]
    table_name: str
    scalars: tuple[ScalarField, ...]
    foreign_keys: tuple[ForeignKeyField, ...]
    navigations: tuple[NavigationField, ...]

    @property
    def name(self) -> str:
        return self.entity_cls.__name__

    @property
    def key_fields(self) -> tuple[ScalarField, ...]:
        return tuple(scalar for scalar in self.scalars if scalar.is_key)

    @property
    def has_composite_key(self) -> bool:
        return len(self.key_fields) >= 2

    def scalar(self, name: str) -> ScalarField:
        for scalar in self.scalars:
            if scalar.name == name:
                return scalar
        raise MappingConfigurationError(f"{self.name} has no persistable field {name!r}")

    def foreign_key_for(self, field_name: str) -> ForeignKeyField | None:
        for foreign_key in self.foreign_keys:
            if foreign_key.name == field_name:
                return foreign_key
        return None

    def foreign_keys_to(self, target: type) -> tuple[ForeignKeyField, ...]:
        return tuple(fk for fk in self.foreign_keys if fk.target is target)

    def project(self, record: T) -> dict[str, Any]:
        """Return the persistable scalar values of ``record`` keyed by field name."""

        return {scalar.name: getattr(record, scalar.name) for scalar in self.scalars}

    def key_of(self, record: T) -> tuple[Any, ...]:
        return tuple(getattr(record, scalar.name) for scalar in self.key_fields)

    def clone(self, record: T) -> T:
        """Create a new instance carrying only the persistable scalar values."""

        return self.entity_cls(**self.project(record))

    def changed_fields(self, current: T, baseline: T) -> tuple[str, ...]:
        return tuple(
            scalar.name
            for scalar in self.scalars
            if getattr(current, scalar.name) != getattr(baseline, scalar.name)
        )

    def differs(self, current: T, baseline: T) -> bool:
        return any(
            getattr(current, scalar.name) != getattr(baseline, scalar.name)
            for scalar in self.scalars
        )

    def to_columns(self, record: T, fields: Iterable[ScalarField] | None = None) -> dict[str, Any]:
        selected = self.scalars if fields is None else fields
        return {scalar.column: getattr(record, scalar.name) for scalar in selected}

    def from_columns(self, row: Mapping[str, Any]) -> T:
        """Build a record from a column-name mapping; absent columns keep their defaults."""

        values = {scalar.name: row[scalar.column] for scalar in self.scalars if scalar.column in row}
        return self.entity_cls(**values)


def build_shape[T](
    entity_cls: type[T],
    *,
    allowed_types: frozenset[type],
    table_name: str | None = None,
) -> EntityShape[T]:
    """Read the field declarations of ``entity_cls`` into an ``EntityShape``."""

    if not dataclasses.is_dataclass(entity_cls):
        raise MappingConfigurationError(f"{entity_cls.__name__} is not a dataclass")
    params = getattr(entity_cls, "__dataclass_params__", None)
    if params is not None and params.frozen:
        raise MappingConfigurationError(
            f"{entity_cls.__name__} is frozen; navigation fields could not be assigned"
        )

    try:
        hints = get_type_hints(entity_cls)
    except NameError as exc:
        raise MappingConfigurationError(
            f"Cannot resolve annotations of {entity_cls.__name__}: {exc}"
        ) from exc

    scalars: list[ScalarField] = []
    pending_foreign_keys: list[tuple[str, str]] = []
    navigations: list[NavigationField] = []

    for dc_field in dataclasses.fields(entity_cls):
        options = dc_field.metadata.get(FIELD_OPTIONS_KEY)
        hint = hints.get(dc_field.name)
        if options is None:
            base, _ = _unwrap_optional(hint)
            if base not in allowed_types:
                raise MappingConfigurationError(
                    f"{entity_cls.__name__}.{dc_field.name} has unsupported type {hint!r}; "
                    "mark it with not_mapped() or a navigation marker"
                )
            options = FieldOptions(role=FieldRole.SCALAR)

        if options.role is FieldRole.NOT_MAPPED:
            continue

        if options.is_navigation:
            if dc_field.default is dataclasses.MISSING and (
                dc_field.default_factory is dataclasses.MISSING
            ):
                raise MappingConfigurationError(
                    f"{entity_cls.__name__}.{dc_field.name} navigation field needs a default"
                )
            navigations.append(_navigation_field(entity_cls, dc_field.name, hint, options))
            continue

        if not dc_field.init:
            raise MappingConfigurationError(
                f"{entity_cls.__name__}.{dc_field.name} must be an init field to be cloned"
            )
        scalars.append(_scalar_field(entity_cls, dc_field.name, hint, options, allowed_types))
        if options.navigation is not None:
            pending_foreign_keys.append((dc_field.name, options.navigation))

    foreign_keys = tuple(
        _foreign_key_field(entity_cls, field_name, navigation_name, navigations)
        for field_name, navigation_name in pending_foreign_keys
    )

    return EntityShape(
        entity_cls=entity_cls,
        table_name=table_name or entity_cls.__name__,
        scalars=tuple(scalars),
        foreign_keys=foreign_keys,
        navigations=tuple(navigations),
    )


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        nullable = len(args) != len(get_args(hint))
        if len(args) == 1:
            return args[0], nullable
        return hint, nullable
    return hint, False


def _scalar_field(
    entity_cls: type,
    name: str,
    hint: Any,
    options: FieldOptions,
    allowed_types: frozenset[type],
) -> ScalarField:
    python_type, nullable = _unwrap_optional(hint)
    if python_type not in allowed_types:
        raise MappingConfigurationError(
            f"{entity_cls.__name__}.{name} has unsupported scalar type {hint!r}"
        )
    kind = options.kind or DEFAULT_KIND_BY_TYPE[python_type]
    if PYTHON_TYPE_BY_KIND[kind] is not python_type:
        raise MappingConfigurationError(
            f"{entity_cls.__name__}.{name} declares kind {kind} for type {python_type.__name__}"
        )
    return ScalarField(
        name=name,
        column=options.column or name,
        python_type=python_type,
        kind=kind,
        nullable=nullable,
        is_key=options.role is FieldRole.KEY,
        options=options,
    )


def _navigation_field(
    entity_cls: type,
    name: str,
    hint: Any,
    options: FieldOptions,
) -> NavigationField:
    if options.role is FieldRole.COLLECTION:
        if get_origin(hint) is not list or len(get_args(hint)) != 1:
            raise MappingConfigurationError(
                f"{entity_cls.__name__}.{name} collection must be annotated list[Element]"
            )
        return NavigationField(name=name, target=get_args(hint)[0], many=True, via=options.via)

    target, _ = _unwrap_optional(hint)
    if not isinstance(target, type):
        raise MappingConfigurationError(
            f"{entity_cls.__name__}.{name} reference must be annotated with an entity class"
        )
    return NavigationField(name=name, target=target, many=False)


def _foreign_key_field(
    entity_cls: type,
    field_name: str,
    navigation_name: str,
    navigations: list[NavigationField],
) -> ForeignKeyField:
    for navigation in navigations:
        if navigation.name == navigation_name:
            if navigation.many:
                raise MappingConfigurationError(
                    f"{entity_cls.__name__}.{field_name} points at collection "
                    f"{navigation_name!r}; foreign keys need a reference field"
                )
            return ForeignKeyField(
                name=field_name, navigation=navigation_name, target=navigation.target
            )
    raise MappingConfigurationError(
        f"{entity_cls.__name__}.{field_name} names unknown reference field {navigation_name!r}"
    )
