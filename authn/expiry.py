"""Resolve token lifetime from command line options and configuration."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .config import CliConfig
from .errors import ConfigurationError, ParseError

EXPIRES_AT_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


def parse_expires_at(value: str) -> datetime:
    """Parse an absolute expiry; values without an offset are taken as UTC."""
    for fmt in EXPIRES_AT_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    raise ParseError(
        f"Couldn't parse expires_at parameter: {value!r}, expected one of "
        "YYYY-MM-DD, YYYY-MM-DD hh:mm, YYYY-MM-DD hh:mm:ss [+zzzz]"
    )


def extract_expiry(
    expires_in: Optional[int],
    expires_at: Optional[str],
    config: CliConfig,
    now: Optional[datetime] = None,
) -> int:
    """Return the token lifetime in seconds.

    ``expires_in`` wins over ``expires_at``, which wins over the configured
    default. A moment in the past yields a negative lifetime.
    """
    if expires_in is not None:
        return expires_in

    if expires_at is not None:
        now = now or datetime.now(timezone.utc)
        return int((parse_expires_at(expires_at) - now).total_seconds())

    if config.expires_in is not None:
        return config.expires_in

    raise ConfigurationError(
        "Expiration date was not provided and config has no default"
    )


__all__ = ["extract_expiry", "parse_expires_at"]
