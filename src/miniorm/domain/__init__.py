"""Change-tracking and relationship-mapping engine."""

from __future__ import annotations

from .context import DataContext
from .errors import (
    DuplicateKeyError,
    InternalDispatchError,
    InvalidOperationError,
    MappingConfigurationError,
    MiniOrmError,
    ReferenceResolutionError,
    StorageOperationError,
    ValidationBatchError,
)
from .persistence import PersistenceOrchestrator, PersistencePlan, SaveResult
from .resolution import RelationshipResolver

__all__ = [
    "DataContext",
    "DuplicateKeyError",
    "InternalDispatchError",
    "InvalidOperationError",
    "MappingConfigurationError",
    "MiniOrmError",
    "PersistenceOrchestrator",
    "PersistencePlan",
    "ReferenceResolutionError",
    "RelationshipResolver",
    "SaveResult",
    "StorageOperationError",
    "ValidationBatchError",
]
