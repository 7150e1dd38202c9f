"""Relationship resolution over loaded record collections.

Resolution runs once per data context, after every collection is loaded:

1. reference edges assign ``owner.<navigation>`` from the target collection,
   matching the foreign key against the target's primary key;
2. collection edges assign ``owner.<navigation>`` a fresh list of element
   records whose join field equals the owner's primary key. For join records
   (composite key) the list holds the join records themselves.

Assignments are recomputed from scalar values each run, so resolving the same
graph twice yields the same navigation values.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any

from miniorm.domain.errors import MappingConfigurationError, ReferenceResolutionError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from miniorm.domain.model import CollectionEdge, ReferenceEdge
    from miniorm.domain.ports import SchemaMetadataProvider
    from miniorm.domain.tracking import TrackedSet

log = logging.getLogger(__name__)


class RelationshipResolver:
    """Populates navigation fields from declared key relationships."""

    def __init__(self, metadata: SchemaMetadataProvider) -> None:
        self._metadata = metadata

    def resolve(self, sets: Mapping[type, TrackedSet[Any]]) -> None:
        relationships = self._metadata.relationships()
        shapes = self._metadata.shapes()

        for shape in shapes:
            for edge in relationships.references_for(shape.entity_cls):
                self._resolve_reference(edge, sets)

        for shape in shapes:
            for edge in relationships.collections_for(shape.entity_cls):
                self._resolve_collection(edge, sets)

    def _resolve_reference(self, edge: ReferenceEdge, sets: Mapping[type, TrackedSet[Any]]) -> None:
        owners = _tracked(sets, edge.owner)
        targets = _tracked(sets, edge.target)
        by_key = {targets.shape.key_of(target)[0]: target for target in targets}

        for owner in owners:
            value = getattr(owner, edge.foreign_key)
            if value is None:
                setattr(owner, edge.navigation, None)
                continue
            try:
                target = by_key[value]
            except KeyError:
                raise ReferenceResolutionError(
                    owners.shape.name, edge.foreign_key, value
                ) from None
            setattr(owner, edge.navigation, target)

        log.debug(
            "Resolved %s.%s for %d records", owners.shape.name, edge.navigation, len(owners)
        )

    def _resolve_collection(
        self, edge: CollectionEdge, sets: Mapping[type, TrackedSet[Any]]
    ) -> None:
        owners = _tracked(sets, edge.owner)
        elements = _tracked(sets, edge.element)

        grouped: defaultdict[Any, list[Any]] = defaultdict(list)
        for element in elements:
            grouped[getattr(element, edge.join_field)].append(element)

        for owner in owners:
            owner_key = owners.shape.key_of(owner)[0]
            setattr(owner, edge.navigation, list(grouped.get(owner_key, ())))

        log.debug(
            "Resolved %s.%s (%s via %s.%s)",
            owners.shape.name,
            edge.navigation,
            edge.cardinality,
            elements.shape.name,
            edge.join_field,
        )


def _tracked(sets: Mapping[type, TrackedSet[Any]], entity_cls: type) -> TrackedSet[Any]:
    try:
        return sets[entity_cls]
    except KeyError:
        raise MappingConfigurationError(
            f"No loaded collection for {entity_cls.__name__}"
        ) from None
