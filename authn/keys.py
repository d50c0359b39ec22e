"""Key material for signing and verification, keyed by algorithm."""

from __future__ import annotations

from typing import Any, Dict, Type, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    load_der_private_key,
    load_der_public_key,
)

from .errors import AuthnError, ConfigurationError, SerializationError, ValidationError
from .jose import Algorithm

EncodingKey = Union[bytes, ec.EllipticCurvePrivateKey]
DecodingKey = Union[bytes, ec.EllipticCurvePublicKey]

# RFC 7518 section 3.4
EC_CURVES: Dict[Algorithm, Type[ec.EllipticCurve]] = {
    Algorithm.ES256: ec.SECP256R1,
    Algorithm.ES384: ec.SECP384R1,
}


def _parse_algorithm(value: Any, error: Type[AuthnError]) -> Algorithm:
    try:
        return Algorithm.parse(value)
    except ConfigurationError as err:
        raise error(str(err)) from err


def _key_bytes(key: Any, error: Type[AuthnError]) -> bytes:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise error(f"key must be bytes, got {type(key).__name__}")
    return bytes(key)


def _check_curve(algorithm: Algorithm, key: Any) -> None:
    expected = EC_CURVES[algorithm]
    if not isinstance(key.curve, expected):
        raise ValueError(
            f"{algorithm} requires curve {expected.name}, got {key.curve.name}"
        )


def _load_ec_private_key(
    algorithm: Algorithm, key: bytes
) -> ec.EllipticCurvePrivateKey:
    private_key = load_der_private_key(key, password=None)
    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise ValueError("not an elliptic curve private key")
    _check_curve(algorithm, private_key)
    return private_key


def _load_ec_public_key(algorithm: Algorithm, key: bytes) -> ec.EllipticCurvePublicKey:
    try:
        public_key = load_der_public_key(key)
    except (ValueError, UnsupportedAlgorithm):
        # Verification may be configured with the signing key itself.
        public_key = _load_ec_private_key(algorithm, key).public_key()
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise ValueError("not an elliptic curve public key")
    _check_curve(algorithm, public_key)
    return public_key


def encoding_key(algorithm: Union[Algorithm, str], key: bytes) -> EncodingKey:
    """Return the signing key for ``algorithm`` built from raw ``key`` bytes.

    HMAC algorithms sign with the secret as-is; EC algorithms expect a
    DER-encoded PKCS#8 (or SEC1) private key on the curve the algorithm
    names (P-256 for ES256, P-384 for ES384).
    """
    algorithm = _parse_algorithm(algorithm, SerializationError)
    key = _key_bytes(key, SerializationError)
    if algorithm.is_hmac:
        return key
    if algorithm.is_ec:
        try:
            return _load_ec_private_key(algorithm, key)
        except (ValueError, TypeError, UnsupportedAlgorithm) as err:
            raise SerializationError(
                f"invalid {algorithm} signing key: {err}"
            ) from err
    raise SerializationError(f"unsupported algorithm: {algorithm}")


def decoding_key(algorithm: Union[Algorithm, str], key: bytes) -> DecodingKey:
    """Return the verification key for ``algorithm`` built from ``key`` bytes."""
    algorithm = _parse_algorithm(algorithm, ValidationError)
    key = _key_bytes(key, ValidationError)
    if algorithm.is_hmac:
        return key
    if algorithm.is_ec:
        try:
            return _load_ec_public_key(algorithm, key)
        except (ValueError, TypeError, UnsupportedAlgorithm) as err:
            raise ValidationError(
                f"invalid {algorithm} verification key: {err}"
            ) from err
    raise ValidationError(f"unsupported algorithm: {algorithm}")


__all__ = ["EncodingKey", "DecodingKey", "EC_CURVES", "encoding_key", "decoding_key"]
