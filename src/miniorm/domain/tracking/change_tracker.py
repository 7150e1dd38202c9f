"""Per-entity change tracking."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from miniorm.domain.tracking.snapshot import SnapshotStore

if TYPE_CHECKING:
    from collections.abc import Iterable

    from miniorm.domain.model import EntityShape

log = logging.getLogger(__name__)


class ChangeTracker[T]:
    """Stages additions and removals and detects modified records.

    Only staged records are ever reported as added or removed; modified records
    are computed on demand by diffing live records against the snapshot.
    """

    def __init__(self, shape: EntityShape[T], initial: Iterable[T] = ()) -> None:
        self._shape = shape
        self._snapshot = SnapshotStore(shape, initial)
        self._added: list[T] = []
        self._removed: list[T] = []

    @property
    def shape(self) -> EntityShape[T]:
        return self._shape

    @property
    def snapshot(self) -> SnapshotStore[T]:
        return self._snapshot

    @property
    def added(self) -> tuple[T, ...]:
        return tuple(self._added)

    @property
    def removed(self) -> tuple[T, ...]:
        return tuple(self._removed)

    def add(self, record: T) -> None:
        self._added.append(record)

    def remove(self, record: T) -> None:
        self._removed.append(record)

    def get_modified(self, live: Iterable[T]) -> list[T]:
        """Return live records whose scalar fields differ from their snapshot entry.

        Records without a snapshot entry are new and never reported.
        """

        modified: list[T] = []
        for record in live:
            baseline = self._snapshot.match(record)
            if baseline is None:
                continue
            if self._shape.differs(record, baseline):
                log.debug(
                    "%s %r modified: %s",
                    self._shape.name,
                    self._shape.key_of(record),
                    ", ".join(self._shape.changed_fields(record, baseline)),
                )
                modified.append(record)
        return modified

    def changed_fields(self, record: T) -> tuple[str, ...]:
        baseline = self._snapshot.match(record)
        if baseline is None:
            return ()
        return self._shape.changed_fields(record, baseline)

    def has_changes(self, live: Iterable[T]) -> bool:
        return bool(self._added or self._removed or self.get_modified(live))
