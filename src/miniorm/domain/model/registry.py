"""Model registry: the declarative registration step for entity types."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from miniorm.domain.errors import MappingConfigurationError
from miniorm.domain.model.fields import ALLOWED_SCALAR_TYPES
from miniorm.domain.model.relationships import (
    CollectionEdge,
    ManyToManyEdge,
    OneToManyEdge,
    ReferenceEdge,
)
from miniorm.domain.model.shape import EntityShape, build_shape

if TYPE_CHECKING:
    from miniorm.domain.model.shape import NavigationField

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RelationshipMap:
    """Relationship descriptors grouped by owning entity type."""

    references: dict[type, tuple[ReferenceEdge, ...]]
    collections: dict[type, tuple[CollectionEdge, ...]]

    def references_for(self, entity_cls: type) -> tuple[ReferenceEdge, ...]:
        return self.references.get(entity_cls, ())

    def collections_for(self, entity_cls: type) -> tuple[CollectionEdge, ...]:
        return self.collections.get(entity_cls, ())


class Model:
    """Ordered set of entity shapes plus the relationships between them.

    Register every entity class after all of them are defined so that forward
    references in annotations resolve. Registration order is the load and save
    order of the data context.
    """

    def __init__(self, *, allowed_types: frozenset[type] = ALLOWED_SCALAR_TYPES) -> None:
        self._allowed_types = allowed_types
        self._shapes: dict[type, EntityShape[object]] = {}
        self._relationships: RelationshipMap | None = None

    @property
    def allowed_types(self) -> frozenset[type]:
        return self._allowed_types

    def register[T](self, entity_cls: type[T], *, table: str | None = None) -> EntityShape[T]:
        if entity_cls in self._shapes:
            raise MappingConfigurationError(f"{entity_cls.__name__} is already registered")
        shape = build_shape(entity_cls, allowed_types=self._allowed_types, table_name=table)
        if not shape.key_fields:
            raise MappingConfigurationError(f"{entity_cls.__name__} declares no key field")
        self._shapes[entity_cls] = shape  # pyright: ignore[reportArgumentType]
        self._relationships = None
        log.debug("Registered %s as table %s", shape.name, shape.table_name)
        return shape

    def __contains__(self, entity_cls: object) -> bool:
        return entity_cls in self._shapes

    def shapes(self) -> tuple[EntityShape[object], ...]:
        return tuple(self._shapes.values())

    def shape_for[T](self, entity_cls: type[T]) -> EntityShape[T]:
        try:
            return self._shapes[entity_cls]  # pyright: ignore[reportReturnType]
        except KeyError:
            raise MappingConfigurationError(
                f"{entity_cls.__name__} is not registered with this model"
            ) from None

    def table_name(self, entity_cls: type) -> str:
        return self.shape_for(entity_cls).table_name

    def column_names(self, entity_cls: type) -> tuple[str, ...]:
        return tuple(scalar.column for scalar in self.shape_for(entity_cls).scalars)

    def relationships(self) -> RelationshipMap:
        """Build (once) and return the relationship descriptors of the model."""

        if self._relationships is None:
            self._relationships = self._build_relationships()
        return self._relationships

    def _build_relationships(self) -> RelationshipMap:
        references: dict[type, tuple[ReferenceEdge, ...]] = {}
        collections: dict[type, tuple[CollectionEdge, ...]] = {}

        for shape in self._shapes.values():
            edges: list[ReferenceEdge] = []
            for foreign_key in shape.foreign_keys:
                target = self._registered_target(shape, foreign_key.navigation, foreign_key.target)
                if len(target.key_fields) != 1:
                    raise MappingConfigurationError(
                        f"{shape.name}.{foreign_key.name} references {target.name}, "
                        "which has a composite key"
                    )
                edges.append(
                    ReferenceEdge(
                        owner=shape.entity_cls,
                        foreign_key=foreign_key.name,
                        navigation=foreign_key.navigation,
                        target=target.entity_cls,
                    )
                )
            references[shape.entity_cls] = tuple(edges)

            collections[shape.entity_cls] = tuple(
                self._collection_edge(shape, navigation)
                for navigation in shape.navigations
                if navigation.many
            )

        self._check_reference_cycles(references)
        return RelationshipMap(references=references, collections=collections)

    def _registered_target(
        self, shape: EntityShape[object], navigation: str, target: type
    ) -> EntityShape[object]:
        if target not in self._shapes:
            raise MappingConfigurationError(
                f"{shape.name}.{navigation} targets unregistered type {target!r}"
            )
        return self._shapes[target]

    def _collection_edge(
        self, owner: EntityShape[object], navigation: NavigationField
    ) -> CollectionEdge:
        if len(owner.key_fields) != 1:
            raise MappingConfigurationError(
                f"{owner.name}.{navigation.name}: collection owners need a single key field"
            )
        element = self._registered_target(owner, navigation.name, navigation.target)

        if element.has_composite_key:
            join_field = navigation.via or _join_key_towards(element, owner, navigation)
            element.scalar(join_field)
            return ManyToManyEdge(
                owner=owner.entity_cls,
                navigation=navigation.name,
                element=element.entity_cls,
                join_field=join_field,
            )

        if navigation.via is not None:
            join_field = navigation.via
        else:
            towards_owner = [fk.name for fk in element.foreign_keys_to(owner.entity_cls)]
            _require_single_join(owner, navigation, element, towards_owner)
            # key-equals-foreign-key convention when no foreign key is declared
            join_field = towards_owner[0] if towards_owner else element.key_fields[0].name
        element.scalar(join_field)
        return OneToManyEdge(
            owner=owner.entity_cls,
            navigation=navigation.name,
            element=element.entity_cls,
            join_field=join_field,
        )

    def _check_reference_cycles(self, references: dict[type, tuple[ReferenceEdge, ...]]) -> None:
        graph = {
            owner: {edge.target for edge in edges if edge.target is not owner}
            for owner, edges in references.items()
        }
        visiting: list[type] = []
        done: set[type] = set()

        def visit(node: type) -> None:
            if node in done:
                return
            if node in visiting:
                cycle = [*visiting[visiting.index(node) :], node]
                names = " -> ".join(entity.__name__ for entity in cycle)
                raise MappingConfigurationError(f"Foreign keys form a cycle: {names}")
            visiting.append(node)
            for target in graph.get(node, ()):
                visit(target)
            visiting.pop()
            done.add(node)

        for owner in graph:
            visit(owner)


def _join_key_towards(
    join: EntityShape[object], owner: EntityShape[object], navigation: NavigationField
) -> str:
    candidates = [
        key_field.name
        for key_field in join.key_fields
        if (foreign_key := join.foreign_key_for(key_field.name)) is not None
        and foreign_key.target is owner.entity_cls
    ]
    if not candidates:
        raise MappingConfigurationError(
            f"Join type {join.name} has no key field referencing {owner.name}"
        )
    _require_single_join(owner, navigation, join, candidates)
    return candidates[0]


def _require_single_join(
    owner: EntityShape[object],
    navigation: NavigationField,
    element: EntityShape[object],
    candidates: list[str],
) -> None:
    if len(candidates) > 1:
        raise MappingConfigurationError(
            f"{owner.name}.{navigation.name}: {element.name} has several fields referencing "
            f"{owner.name} ({', '.join(candidates)}); declare collection(via=...)"
        )
