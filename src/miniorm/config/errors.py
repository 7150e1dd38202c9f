"""Configuration errors."""

from __future__ import annotations

from miniorm.domain.errors import MiniOrmError


class ConfigurationError(MiniOrmError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required environment variables are absent or blank."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"Missing configuration for: {', '.join(sorted(names))}")
        self.names = tuple(sorted(names))
