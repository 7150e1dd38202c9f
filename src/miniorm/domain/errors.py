"""Error taxonomy raised by the mapping engine."""

from __future__ import annotations


class MiniOrmError(RuntimeError):
    """Base class for every error raised by miniorm."""


class MappingConfigurationError(MiniOrmError):
    """Raised when an entity class or relationship graph cannot be mapped."""


class DuplicateKeyError(MiniOrmError):
    """Raised when two loaded records share the same primary key value(s)."""

    def __init__(self, entity_name: str, key: tuple[object, ...]) -> None:
        super().__init__(f"Duplicate primary key {key!r} in {entity_name}")
        self.entity_name = entity_name
        self.key = key


class ValidationBatchError(MiniOrmError):
    """Raised before any I/O when live records fail validation."""

    def __init__(self, invalid_count: int, entity_name: str) -> None:
        super().__init__(f"{invalid_count} invalid entities found in {entity_name}")
        self.invalid_count = invalid_count
        self.entity_name = entity_name


class ReferenceResolutionError(MiniOrmError):
    """Raised when a foreign key has no matching target record."""

    def __init__(self, entity_name: str, field_name: str, value: object) -> None:
        super().__init__(
            f"{entity_name}.{field_name} references missing record with key {value!r}"
        )
        self.entity_name = entity_name
        self.field_name = field_name
        self.value = value


class StorageOperationError(MiniOrmError):
    """Raised when the storage gateway reports a failure."""


class InvalidOperationError(MiniOrmError):
    """Raised when an operation is not valid in the current state."""


class InternalDispatchError(MiniOrmError):
    """Raised when persistence dispatch fails before any storage call for an entity type."""

    def __init__(self, entity_name: str, reason: str) -> None:
        super().__init__(f"Could not dispatch persistence for {entity_name}: {reason}")
        self.entity_name = entity_name
