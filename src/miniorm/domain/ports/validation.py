"""Record validation port."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Validator(Protocol):
    """Decides whether a live record may be persisted."""

    def is_valid(self, record: object) -> bool: ...
