"""Live record collections paired with their change tracker."""

from __future__ import annotations

from collections.abc import Collection
from typing import TYPE_CHECKING

from miniorm.domain.tracking.change_tracker import ChangeTracker

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from miniorm.domain.model import EntityShape


class TrackedSet[T](Collection[T]):
    """The records of one entity type as observed and mutated by callers.

    Both the live records and the snapshot are clones of the loaded input, so
    neither shares state with objects the caller passed in.
    """

    def __init__(self, shape: EntityShape[T], records: Iterable[T] = ()) -> None:
        loaded = list(records)
        self._shape = shape
        self._live: list[T] = [shape.clone(record) for record in loaded]
        self.change_tracker: ChangeTracker[T] = ChangeTracker(shape, loaded)

    @property
    def shape(self) -> EntityShape[T]:
        return self._shape

    @property
    def entity_cls(self) -> type[T]:
        return self._shape.entity_cls

    def __iter__(self) -> Iterator[T]:
        return iter(self._live)

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, item: object) -> bool:
        return any(record is item for record in self._live)

    def __repr__(self) -> str:
        return f"TrackedSet({self._shape.name}, {len(self._live)} records)"

    def add(self, record: T) -> None:
        self._check_type(record)
        self._live.append(record)
        self.change_tracker.add(record)

    def add_all(self, records: Iterable[T]) -> None:
        for record in records:
            self.add(record)

    def remove(self, record: T) -> bool:
        """Remove ``record`` from the live set and stage it for deletion.

        Returns ``False`` without staging anything when the record is not live.
        """

        for index, candidate in enumerate(self._live):
            if candidate is record:
                del self._live[index]
                self.change_tracker.remove(record)
                return True
        return False

    def remove_all(self, records: Iterable[T]) -> int:
        return sum(1 for record in list(records) if self.remove(record))

    def clear(self) -> None:
        self.remove_all(self._live)

    def get_modified(self) -> list[T]:
        return self.change_tracker.get_modified(self._live)

    def has_changes(self) -> bool:
        return self.change_tracker.has_changes(self._live)

    def _check_type(self, record: object) -> None:
        if not isinstance(record, self._shape.entity_cls):
            raise TypeError(
                f"Expected {self._shape.name}, got {type(record).__name__}"
            )
