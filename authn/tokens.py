"""Issuing and verifying JWS compact authentication tokens.

Tokens are signed JWTs whose payload is a :class:`~authn.jose.Claims`.
Verification is done in two phases: the payload is first read *without*
checking the signature, only to learn which issuer configuration applies,
and the token is then verified against that configuration's algorithm and
key. Claims returned by :func:`extract_jws_compact` are trusted; claims
returned by :func:`parse_jws_compact` are not.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

import jwt

from .account import Authenticable
from .bearer import parse_bearer_token
from .errors import (
    ConfigurationError,
    ParseError,
    SerializationError,
    ValidationError,
)
from .jose import Algorithm, Claims, ConfigMap
from .keys import decoding_key, encoding_key

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


@dataclass(frozen=True)
class TokenBuilder:
    """Immutable accumulator of the inputs needed to sign a token.

    Every setter returns a new builder, so partially configured builders can
    be shared and specialised freely. Required fields are only checked by
    :meth:`claims` and :meth:`build`.

    Example:
        token = (
            TokenBuilder()
            .issuer("iam.example.org")
            .subject(AccountId.parse("alice.example.org"))
            .key(Algorithm.HS256, secret)
            .expires_in(3600)
            .build()
        )
    """

    issuer_name: Optional[str] = None
    account: Optional[Authenticable] = None
    expires_in_seconds: Optional[int] = None
    algorithm: Optional[Union[Algorithm, str]] = None
    signing_key: Optional[bytes] = dataclasses.field(default=None, repr=False)
    delegated_audience: Optional[str] = None

    def issuer(self, value: str) -> "TokenBuilder":
        return dataclasses.replace(self, issuer_name=value)

    def subject(self, value: Authenticable) -> "TokenBuilder":
        return dataclasses.replace(self, account=value)

    def expires_in(self, value: int) -> "TokenBuilder":
        return dataclasses.replace(self, expires_in_seconds=value)

    def key(self, algorithm: Union[Algorithm, str], key: bytes) -> "TokenBuilder":
        return dataclasses.replace(self, algorithm=algorithm, signing_key=key)

    def cross_audience(self, value: str) -> "TokenBuilder":
        """Issue the token for ``value`` on behalf of the subject's audience."""
        return dataclasses.replace(self, delegated_audience=value)

    def _algorithm(self) -> Algorithm:
        if self.algorithm is None:
            raise SerializationError("missing algorithm")
        try:
            return Algorithm.parse(self.algorithm)
        except ConfigurationError as err:
            raise SerializationError(str(err)) from err

    def claims(self, now: Optional[int] = None) -> Claims:
        """Validate required fields and assemble the token payload."""
        if not self.issuer_name:
            raise SerializationError("invalid issuer")
        if self.account is None:
            raise SerializationError("missing subject")
        self._algorithm()
        if self.signing_key is None:
            raise SerializationError("missing key")

        account_id = self.account.as_account_id()
        audience = account_id.audience
        if self.delegated_audience is not None:
            audience = f"{audience}:{self.delegated_audience}"

        claims = Claims.new(self.issuer_name, audience, account_id.label)
        if self.expires_in_seconds is not None:
            issued_at = _now() if now is None else now
            claims = claims.with_expiration(issued_at + self.expires_in_seconds)
        return claims

    def build(self) -> str:
        """Sign the claims and return the JWS compact serialization."""
        claims = self.claims()
        algorithm = self._algorithm()
        key = encoding_key(algorithm, self.signing_key)
        try:
            token = jwt.encode(claims.to_payload(), key, algorithm=algorithm.value)
        except (jwt.PyJWTError, TypeError, ValueError) as err:
            raise SerializationError(f"encoding error: {err}") from err

        logger.debug(
            f"Issued {algorithm} token for sub={claims.subject} aud={claims.audience} "
            f"iss={claims.issuer}"
        )
        return token


def parse_jws_compact(token: str) -> Claims:
    """Read the claims of ``token`` without verifying its signature.

    The result must only be used to pick a verification configuration.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as err:
        raise ParseError("invalid claims of the authentication token") from err
    return Claims.from_payload(payload)


def decode_jws_compact(
    token: str,
    algorithm: Union[Algorithm, str],
    key: bytes,
    *,
    issuer: Optional[str] = None,
    validate_exp: bool = True,
) -> Claims:
    """Verify ``token`` with ``algorithm`` and ``key`` and return its claims.

    Args:
        token: JWS compact serialization.
        algorithm: The only algorithm the token may be signed with.
        key: HMAC secret or DER-encoded EC public (or private) key.
        issuer: When given, the ``iss`` claim must equal it.
        validate_exp: Reject the token once its ``exp`` has passed.
    """
    try:
        algorithm = Algorithm.parse(algorithm)
    except ConfigurationError as err:
        raise ValidationError(str(err)) from err
    verification_key = decoding_key(algorithm, key)
    try:
        payload = jwt.decode(
            token,
            verification_key,
            algorithms=[algorithm.value],
            issuer=issuer,
            options={
                "verify_exp": validate_exp,
                "verify_aud": False,
                "require": ["iss", "aud", "sub"],
            },
        )
    except jwt.PyJWTError as err:
        raise ValidationError(
            f"verification of the authentication token failed: {err}"
        ) from err
    try:
        return Claims.from_payload(payload)
    except ParseError as err:
        raise ValidationError(
            f"verification of the authentication token failed: {err}"
        ) from err


def extract_jws_compact(token: str, config: ConfigMap) -> Claims:
    """Verify ``token`` against the trust configuration of its issuer.

    Audience membership is checked on the home segment of the claimed
    audience, so ``svcA:svcB`` is accepted wherever ``svcA`` is. Expiry is
    only enforced when the token carries an ``exp`` claim.
    """
    claims = parse_jws_compact(token)

    issuer_config = config.get(claims.issuer)
    if issuer_config is None:
        logger.warning(f"Rejected token from unknown issuer {claims.issuer}")
        raise ConfigurationError(
            f"issuer = {claims.issuer} of the authentication token is not allowed"
        )

    if not issuer_config.allows(claims.audience):
        logger.warning(
            f"Rejected token for audience {claims.audience} from issuer {claims.issuer}"
        )
        raise ValidationError(
            f"audience = {claims.audience} of the authentication token is not allowed"
        )

    verified = decode_jws_compact(
        token,
        issuer_config.algorithm,
        issuer_config.key,
        issuer=claims.issuer,
        validate_exp=claims.expiration_time is not None,
    )
    logger.debug(
        f"Verified token for sub={verified.subject} aud={verified.audience} "
        f"iss={verified.issuer}"
    )
    return verified


def extract_from_header(header: Union[str, bytes], config: ConfigMap) -> Claims:
    """Verify the bearer token carried by an ``Authorization`` header value."""
    return extract_jws_compact(parse_bearer_token(header), config)


__all__ = [
    "TokenBuilder",
    "parse_jws_compact",
    "decode_jws_compact",
    "extract_jws_compact",
    "extract_from_header",
]
