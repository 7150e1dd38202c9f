"""Storage gateway port consumed by the data context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from miniorm.domain.model import EntityShape


@runtime_checkable
class TransactionHandle(Protocol):
    """One open storage transaction."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class StorageGateway(Protocol):
    """Raw record storage.

    Batch writes run inside the transaction returned by the latest
    ``begin_transaction`` call. Failures surface as ``StorageOperationError``.
    """

    def fetch_all[T](self, shape: EntityShape[T]) -> Sequence[T]: ...

    def insert_batch[T](self, shape: EntityShape[T], records: Sequence[T]) -> None: ...

    def update_batch[T](self, shape: EntityShape[T], records: Sequence[T]) -> None: ...

    def delete_batch[T](self, shape: EntityShape[T], records: Sequence[T]) -> None: ...

    def begin_transaction(self) -> TransactionHandle: ...
