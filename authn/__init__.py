"""authn: signed authentication tokens asserting account identities."""

from .account import AccountId, Authenticable
from .bearer import Token, parse_bearer_token
from .errors import (
    AuthnError,
    ConfigurationError,
    Error,
    ParseError,
    SerializationError,
    ValidationError,
)
from .jose import Algorithm, Claims, ConfigMap, IssuerConfig
from .tokens import (
    TokenBuilder,
    decode_jws_compact,
    extract_from_header,
    extract_jws_compact,
    parse_jws_compact,
)

__version__ = "0.1.0"
__all__ = [
    "AccountId",
    "Authenticable",
    "Algorithm",
    "Claims",
    "ConfigMap",
    "IssuerConfig",
    "Token",
    "TokenBuilder",
    "parse_bearer_token",
    "parse_jws_compact",
    "decode_jws_compact",
    "extract_jws_compact",
    "extract_from_header",
    "AuthnError",
    "Error",
    "ParseError",
    "ValidationError",
    "ConfigurationError",
    "SerializationError",
]
