"""Required environment variables."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the named environment variables, raising if any is missing or blank."""

    values = {name: os.getenv(name, "") for name in names}
    missing = [name for name, value in values.items() if not value.strip()]
    if missing:
        raise MissingConfigurationError(missing)
    return values


def require_env_var(name: str) -> str:
    return require_env_vars([name])[name]
