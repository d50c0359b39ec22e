"""Error types raised while issuing and verifying authentication tokens."""

from __future__ import annotations


class AuthnError(Exception):
    """Base class for every failure surfaced by :mod:`authn`.

    The message passed to the constructor is the human-readable detail and is
    what ``str(error)`` returns.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return self.detail


Error = AuthnError


class ParseError(AuthnError):
    """Malformed account id, bearer header or token structure."""


class ValidationError(AuthnError):
    """Token rejected by audience policy, signature or expiry checks."""


class ConfigurationError(ValidationError):
    """Issuer or audience missing from configuration, or unusable config."""


class SerializationError(AuthnError):
    """Failure while constructing or encoding a token."""


__all__ = [
    "AuthnError",
    "Error",
    "ParseError",
    "ValidationError",
    "ConfigurationError",
    "SerializationError",
]
