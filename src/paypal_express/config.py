"""Gateway settings and environment lookups."""

import os
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10000

_TRUTHY = frozenset(["1", "true", "yes", "on"])


@dataclass(frozen=True)
class GatewaySettings:
    """Per-client transport settings."""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    # Off by default: existing integrations expect an empty third segment.
    embed_currency_in_custom: bool = False

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        """Build settings from ``PAYPAL_TIMEOUT_MS`` and ``PAYPAL_EMBED_CURRENCY``.

        Raises:
            ValueError: If ``PAYPAL_TIMEOUT_MS`` is not a positive integer.
        """
        raw_timeout = os.getenv("PAYPAL_TIMEOUT_MS")
        timeout_ms = DEFAULT_TIMEOUT_MS
        if raw_timeout:
            try:
                timeout_ms = int(raw_timeout)
            except ValueError as e:
                raise ValueError(f"PAYPAL_TIMEOUT_MS must be an integer, got {raw_timeout!r}") from e
            if timeout_ms <= 0:
                raise ValueError("PAYPAL_TIMEOUT_MS must be positive")
        return cls(
            timeout_ms=timeout_ms,
            embed_currency_in_custom=env_flag("PAYPAL_EMBED_CURRENCY"),
        )


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


def require_env(name: str, value: Optional[str] = None) -> str:
    """Return ``value`` if given, else the environment variable ``name``.

    Raises:
        ValueError: If neither is set.
    """
    resolved = value or os.getenv(name)
    if not resolved:
        logger.error("%s is not configured", name)
        raise ValueError(f"{name} must be provided either as argument or environment variable")
    return resolved
