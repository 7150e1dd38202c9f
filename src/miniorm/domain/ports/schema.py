"""Schema metadata port."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from miniorm.domain.model import EntityShape, RelationshipMap


@runtime_checkable
class SchemaMetadataProvider(Protocol):
    """Read-only table, column, key and relationship metadata per entity type."""

    def shapes(self) -> tuple[EntityShape[object], ...]: ...

    def shape_for[T](self, entity_cls: type[T]) -> EntityShape[T]: ...

    def relationships(self) -> RelationshipMap: ...
