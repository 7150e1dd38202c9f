"""Domain port definitions for adapters."""

from __future__ import annotations

from .schema import SchemaMetadataProvider
from .storage import StorageGateway, TransactionHandle
from .validation import Validator

__all__ = [
    "SchemaMetadataProvider",
    "StorageGateway",
    "TransactionHandle",
    "Validator",
]
