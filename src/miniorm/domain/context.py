"""Data context: the in-memory mirror of every registered table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from miniorm.domain.errors import InvalidOperationError
from miniorm.domain.persistence import PersistenceOrchestrator
from miniorm.domain.resolution import RelationshipResolver
from miniorm.domain.tracking import TrackedSet

if TYPE_CHECKING:
    from miniorm.domain.model import Model
    from miniorm.domain.persistence import SaveResult
    from miniorm.domain.ports import StorageGateway, Validator

log = logging.getLogger(__name__)


class DataContext:
    """Eagerly loads every entity type of ``model`` and saves changes back.

    Construction loads each registered type in registration order, wraps it in
    a ``TrackedSet`` and resolves navigation fields. A context is saved at most
    once: saving does not refresh the snapshot, so load a new context afterwards.
    """

    def __init__(self, model: Model, gateway: StorageGateway, *, validator: Validator) -> None:
        self._model = model
        self._sets: dict[type, TrackedSet[Any]] = {}

        for shape in model.shapes():
            records = gateway.fetch_all(shape)
            self._sets[shape.entity_cls] = TrackedSet(shape, records)
            log.info("Loaded %d %s records from %s", len(records), shape.name, shape.table_name)

        RelationshipResolver(model).resolve(self._sets)
        self._orchestrator = PersistenceOrchestrator(gateway, validator)
        self._saved = False

    @property
    def model(self) -> Model:
        return self._model

    @property
    def sets(self) -> tuple[TrackedSet[Any], ...]:
        return tuple(self._sets.values())

    def entities[T](self, entity_cls: type[T]) -> TrackedSet[T]:
        try:
            return self._sets[entity_cls]
        except KeyError:
            raise InvalidOperationError(
                f"{entity_cls.__name__} is not part of this context"
            ) from None

    def __getitem__[T](self, entity_cls: type[T]) -> TrackedSet[T]:
        return self.entities(entity_cls)

    def has_changes(self) -> bool:
        return any(tracked.has_changes() for tracked in self._sets.values())

    def resolve_relationships(self) -> None:
        """Recompute navigation fields from current scalar values."""

        RelationshipResolver(self._model).resolve(self._sets)

    def save_changes(self) -> SaveResult:
        if self._saved:
            raise InvalidOperationError(
                "Changes were already saved; load a new context for further changes"
            )
        result = self._orchestrator.save(self.sets)
        self._saved = True
        return result
