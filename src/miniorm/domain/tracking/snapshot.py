"""Snapshot store: the comparison baseline for change detection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from miniorm.domain.errors import DuplicateKeyError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from miniorm.domain.model import EntityShape


class SnapshotStore[T]:
    """Scalar-only clones of the loaded records, indexed by primary key.

    The store is never mutated after construction; callers rebuild it wholesale.
    """

    def __init__(self, shape: EntityShape[T], records: Iterable[T]) -> None:
        self._shape = shape
        self._records: dict[tuple[Any, ...], T] = {}
        for record in records:
            clone = shape.clone(record)
            key = shape.key_of(clone)
            if key in self._records:
                raise DuplicateKeyError(shape.name, key)
            self._records[key] = clone

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(self._records.values())

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def get(self, key: tuple[Any, ...]) -> T | None:
        return self._records.get(key)

    def match(self, record: T) -> T | None:
        """Return the snapshot record sharing ``record``'s primary key, if any."""

        return self._records.get(self._shape.key_of(record))
