"""Bearer tokens carried in the ``Authorization`` header."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import ParseError


@dataclass(frozen=True)
class Token:
    """An encoded compact token whose signature has not been checked."""

    encoded: str

    def __str__(self) -> str:
        return self.encoded


def parse_bearer_token(header: Union[str, bytes]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` value."""
    if isinstance(header, bytes):
        try:
            header = header.decode("ascii")
        except UnicodeDecodeError:
            raise ParseError("invalid characters in the authorization header") from None

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise ParseError("unsupported or invalid type of the authentication token")
    return parts[1]


__all__ = ["Token", "parse_bearer_token"]
