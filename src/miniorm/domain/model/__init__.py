"""Public surface for declaring and registering entity types."""

from __future__ import annotations

from miniorm.domain.model.fields import (
    ALLOWED_SCALAR_TYPES,
    FieldOptions,
    FieldRole,
    ScalarKind,
    collection,
    foreign_key,
    key,
    not_mapped,
    reference,
    scalar,
)
from miniorm.domain.model.registry import Model, RelationshipMap
from miniorm.domain.model.relationships import (
    Cardinality,
    CollectionEdge,
    ManyToManyEdge,
    OneToManyEdge,
    ReferenceEdge,
    RelationshipEdge,
)
from miniorm.domain.model.shape import (
    EntityShape,
    ForeignKeyField,
    NavigationField,
    ScalarField,
    build_shape,
)

__all__ = [  # noqa: RUF022
    # fields
    "ALLOWED_SCALAR_TYPES",
    "FieldOptions",
    "FieldRole",
    "ScalarKind",
    "collection",
    "foreign_key",
    "key",
    "not_mapped",
    "reference",
    "scalar",
    # shapes
    "EntityShape",
    "ForeignKeyField",
    "NavigationField",
    "ScalarField",
    "build_shape",
    # registry
    "Model",
    "RelationshipMap",
    # relationships
    "Cardinality",
    "CollectionEdge",
    "ManyToManyEdge",
    "OneToManyEdge",
    "ReferenceEdge",
    "RelationshipEdge",
]
