"""Snapshot-based change tracking."""

from __future__ import annotations

from .change_tracker import ChangeTracker
from .snapshot import SnapshotStore
from .tracked_set import TrackedSet

__all__ = [
    "ChangeTracker",
    "SnapshotStore",
    "TrackedSet",
]
