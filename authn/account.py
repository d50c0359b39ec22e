"""Account identity value type."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator

from .errors import ParseError

if TYPE_CHECKING:
    from .jose import Claims


class AccountId(BaseModel):
    """Identity of an account as ``label.audience``.

    Only the first ``.`` separates the label; everything after it, dots
    included, is the audience.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    audience: str

    @classmethod
    def new(cls, label: str, audience: str) -> "AccountId":
        return cls(label=label, audience=audience)

    @classmethod
    def parse(cls, value: str) -> "AccountId":
        """Parse the canonical ``label.audience`` form."""
        parts = value.split(".", 1)
        if len(parts) != 2:
            raise ParseError(f"invalid value for the application name: {value}")
        label, audience = parts
        return cls(label=label, audience=audience)

    @classmethod
    def from_claims(cls, claims: "Claims") -> "AccountId":
        """Account asserted by verified ``claims``."""
        return cls(label=claims.subject, audience=claims.audience)

    @model_validator(mode="before")
    @classmethod
    def parse_canonical_form(cls, data: Any) -> Any:
        # Nested in other models the account travels as its canonical string.
        if isinstance(data, str):
            try:
                parsed = cls.parse(data)
            except ParseError as err:
                raise ValueError(str(err)) from err
            return {"label": parsed.label, "audience": parsed.audience}
        return data

    @model_serializer
    def serialize_canonical_form(self) -> str:
        return str(self)

    def format(self) -> str:
        return f"{self.label}.{self.audience}"

    def as_account_id(self) -> "AccountId":
        return self

    def __str__(self) -> str:
        return self.format()


@runtime_checkable
class Authenticable(Protocol):
    """Anything that can present the account it acts for."""

    def as_account_id(self) -> AccountId:
        ...


__all__ = ["AccountId", "Authenticable"]
