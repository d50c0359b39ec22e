"""JOSE data types: signing algorithms, token claims and issuer trust config."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError, ParseError


class Algorithm(str, Enum):
    """JWS algorithms supported for issuing and verifying tokens."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    ES256 = "ES256"
    ES384 = "ES384"

    @classmethod
    def parse(cls, value: "str | Algorithm") -> "Algorithm":
        if isinstance(value, Algorithm):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ConfigurationError(f"unsupported algorithm: {value}") from None

    @property
    def is_hmac(self) -> bool:
        return self.value.startswith("HS")

    @property
    def is_ec(self) -> bool:
        return self.value.startswith("ES")

    def __str__(self) -> str:
        return self.value


class Claims(BaseModel):
    """Payload carried by an authentication token.

    ``aud`` is either a plain audience or a ``home:delegated`` composite for
    tokens forwarded on behalf of an account to a second service. ``exp`` is
    a Unix timestamp in seconds; ``None`` means the token never expires and
    the field is left out of the encoded payload.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    iss: str
    aud: str
    sub: str
    exp: Optional[int] = None

    @classmethod
    def new(
        cls, issuer: str, audience: str, subject: str, expiration: Optional[int] = None
    ) -> "Claims":
        return cls(iss=issuer, aud=audience, sub=subject, exp=expiration)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Claims":
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as err:
            raise ParseError("invalid claims of the authentication token") from err

    def with_expiration(self, expiration: Optional[int]) -> "Claims":
        return self.model_copy(update={"exp": expiration})

    @property
    def issuer(self) -> str:
        return self.iss

    @property
    def audience(self) -> str:
        return self.aud

    @property
    def subject(self) -> str:
        return self.sub

    @property
    def expiration_time(self) -> Optional[int]:
        return self.exp

    @property
    def home_audience(self) -> str:
        """Audience of the service that issued a delegated token."""
        return self.aud.split(":", 1)[0]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))


class IssuerConfig(BaseModel):
    """Trust settings for tokens produced by one issuer."""

    model_config = ConfigDict(frozen=True)

    audience: FrozenSet[str] = Field(
        default_factory=frozenset, description="Allowed audiences"
    )
    algorithm: Algorithm
    key: bytes = Field(..., repr=False, description="Secret or DER-encoded key")

    @field_validator("algorithm", mode="before")
    @classmethod
    def validate_algorithm(cls, value: Any) -> Algorithm:
        try:
            return Algorithm.parse(value)
        except ConfigurationError as err:
            raise ValueError(str(err)) from err

    def allows(self, audience: str) -> bool:
        """Return ``True`` if ``audience`` (or its home segment) is trusted."""
        return audience.split(":", 1)[0] in self.audience


ConfigMap = Dict[str, IssuerConfig]


__all__ = ["Algorithm", "Claims", "IssuerConfig", "ConfigMap"]
