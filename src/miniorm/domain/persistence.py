"""Persistence orchestration: validate, then write every entity type in one transaction."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from miniorm.domain.errors import InternalDispatchError, ValidationBatchError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from miniorm.domain.model import EntityShape
    from miniorm.domain.ports import StorageGateway, TransactionHandle, Validator
    from miniorm.domain.tracking import TrackedSet

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PersistencePlan[T]:
    """Batches to write for one entity type."""

    shape: EntityShape[T]
    added: tuple[T, ...]
    modified: tuple[T, ...]
    removed: tuple[T, ...]

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.removed)


@dataclass(slots=True)
class SaveResult:
    """Per-entity counts of the rows written by one save."""

    inserted: dict[str, int] = field(default_factory=dict[str, int])
    updated: dict[str, int] = field(default_factory=dict[str, int])
    deleted: dict[str, int] = field(default_factory=dict[str, int])

    @property
    def total(self) -> int:
        return sum(self.inserted.values()) + sum(self.updated.values()) + sum(self.deleted.values())


class PersistenceOrchestrator:
    """Writes the staged and modified records of every tracked set.

    Validation runs over all live records before a transaction is opened. Per
    entity type, inserts run before updates, updates before deletes. Any failure
    raised by a write or the commit rolls the whole transaction back; dispatch
    failures are re-raised without an explicit rollback since no write was
    attempted for that type.
    """

    def __init__(self, gateway: StorageGateway, validator: Validator) -> None:
        self._gateway = gateway
        self._validator = validator

    def save(self, sets: Sequence[TrackedSet[Any]]) -> SaveResult:
        self.validate(sets)

        result = SaveResult()
        transaction = self._gateway.begin_transaction()
        try:
            for tracked in sets:
                plan = self.plan(tracked)
                with _rollback_on_failure(transaction):
                    self._apply(plan, result)
            with _rollback_on_failure(transaction):
                transaction.commit()
        finally:
            transaction.close()

        log.info(
            "Saved changes: %d inserted, %d updated, %d deleted",
            sum(result.inserted.values()),
            sum(result.updated.values()),
            sum(result.deleted.values()),
        )
        return result

    def validate(self, sets: Sequence[TrackedSet[Any]]) -> None:
        for tracked in sets:
            invalid = [record for record in tracked if not self._validator.is_valid(record)]
            if invalid:
                raise ValidationBatchError(len(invalid), tracked.shape.name)

    def plan[T](self, tracked: TrackedSet[T]) -> PersistencePlan[T]:
        """Collect the batches of ``tracked`` without touching storage."""

        try:
            tracker = tracked.change_tracker
            return PersistencePlan(
                shape=tracked.shape,
                added=tracker.added,
                modified=tuple(tracked.get_modified()),
                removed=tracker.removed,
            )
        except (AttributeError, KeyError, TypeError) as exc:
            raise InternalDispatchError(tracked.shape.name, str(exc)) from exc

    def _apply[T](self, plan: PersistencePlan[T], result: SaveResult) -> None:
        if plan.is_empty:
            return
        name = plan.shape.name
        if plan.added:
            log.debug("Inserting %d %s records", len(plan.added), name)
            self._gateway.insert_batch(plan.shape, plan.added)
            result.inserted[name] = len(plan.added)
        if plan.modified:
            log.debug("Updating %d %s records", len(plan.modified), name)
            self._gateway.update_batch(plan.shape, plan.modified)
            result.updated[name] = len(plan.modified)
        if plan.removed:
            log.debug("Deleting %d %s records", len(plan.removed), name)
            self._gateway.delete_batch(plan.shape, plan.removed)
            result.deleted[name] = len(plan.removed)


@contextmanager
def _rollback_on_failure(transaction: TransactionHandle) -> Iterator[None]:
    try:
        yield
    except Exception:
        log.warning("Save failed; rolling back transaction")
        transaction.rollback()
        raise
