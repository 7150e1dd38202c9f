"""Application entry points wiring the engine to the SQLAlchemy and pydantic adapters."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from miniorm.adapters.sqlalchemy import SqlAlchemyStorageGateway, configured_engine, startup
from miniorm.adapters.validation import PydanticValidator
from miniorm.config import ConfigurationError
from miniorm.domain import DataContext
from miniorm.domain.model import Model

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = getLogger(__name__)


@dataclass(slots=True)
class ContextSummary:
    """Record counts of a freshly loaded context, keyed by entity name."""

    counts: dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.counts.values())


def load_model(reference: str) -> Model:
    """Import ``package.module:attribute`` and return the ``Model`` it names."""

    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(f"Model reference must look like 'module:attribute': {reference}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import model module {module_name}") from exc

    candidate = getattr(module, attribute, None)
    if callable(candidate) and not isinstance(candidate, type):
        candidate = candidate()
    if not isinstance(candidate, Model):
        raise ConfigurationError(f"{reference} does not name a miniorm Model")
    return candidate


def open_context(model: Model, *, engine: Engine | None = None) -> DataContext:
    """Load a data context for ``model`` from the configured database."""

    gateway = SqlAlchemyStorageGateway(engine or configured_engine())
    return DataContext(model, gateway, validator=PydanticValidator(model))


def inspect_database(model_reference: str, *, database_uri: str | None = None) -> ContextSummary:
    model = load_model(model_reference)
    engine = configured_engine() or startup(database_uri=database_uri)
    context = open_context(model, engine=engine)
    log.info("Connection success!")
    summary = ContextSummary(
        counts={tracked.shape.name: len(tracked) for tracked in context.sets}
    )
    for name, count in summary.counts.items():
        log.info("%s: %d records", name, count)
    return summary
