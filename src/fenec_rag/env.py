"""Environment lookups for provider credentials."""

from __future__ import annotations

import os

from fenec_rag.exceptions import ConfigurationError


def read_secret(env_var: str, *, purpose: str) -> str:
    """Return the value of ``env_var`` or fail with a message naming what needs it."""
    value = os.environ.get(env_var, "").strip()
    if not value:
        message = f"Environment variable '{env_var}' is required for {purpose} but is not set."
        raise ConfigurationError(message, details={"env_var": env_var})
    return value


def has_secret(env_var: str) -> bool:
    return bool(os.environ.get(env_var, "").strip())
