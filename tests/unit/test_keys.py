"""Tests for algorithm-keyed key construction."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from authn.errors import SerializationError, ValidationError
from authn.jose import Algorithm
from authn.keys import decoding_key, encoding_key


def generate_ec_keys(curve=None):
    key = ec.generate_private_key(curve or ec.SECP256R1())
    private_der = key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_der = key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_der, public_der


@pytest.mark.parametrize("algorithm", [Algorithm.HS256, Algorithm.HS384, Algorithm.HS512])
def test_hmac_keys_are_used_as_is(algorithm: Algorithm) -> None:
    assert encoding_key(algorithm, b"secret") == b"secret"
    assert decoding_key(algorithm, b"secret") == b"secret"


def test_ec_signing_key_is_parsed_from_der() -> None:
    private_der, _ = generate_ec_keys()
    key = encoding_key(Algorithm.ES256, private_der)
    assert isinstance(key, ec.EllipticCurvePrivateKey)


def test_ec_verification_key_is_parsed_from_der() -> None:
    private_der, public_der = generate_ec_keys()
    from_public = decoding_key(Algorithm.ES256, public_der)
    from_private = decoding_key(Algorithm.ES256, private_der)

    assert isinstance(from_public, ec.EllipticCurvePublicKey)
    assert isinstance(from_private, ec.EllipticCurvePublicKey)
    assert from_public.public_numbers() == from_private.public_numbers()


def test_invalid_ec_signing_key_fails() -> None:
    with pytest.raises(SerializationError, match="invalid ES256 signing key"):
        encoding_key(Algorithm.ES256, b"not a der key")


def test_public_key_cannot_be_used_for_signing() -> None:
    _, public_der = generate_ec_keys()
    with pytest.raises(SerializationError):
        encoding_key(Algorithm.ES256, public_der)


def test_rsa_key_is_rejected_for_ec_algorithm() -> None:
    rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    rsa_der = rsa_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    with pytest.raises(SerializationError):
        encoding_key(Algorithm.ES256, rsa_der)
    with pytest.raises(ValidationError):
        decoding_key(Algorithm.ES256, rsa_der)


def test_invalid_ec_verification_key_fails() -> None:
    with pytest.raises(ValidationError, match="invalid ES256 verification key"):
        decoding_key(Algorithm.ES256, b"not a der key")


def test_unlisted_algorithm_is_rejected() -> None:
    with pytest.raises(SerializationError, match="unsupported algorithm"):
        encoding_key("RS256", b"key")
    with pytest.raises(ValidationError, match="unsupported algorithm"):
        decoding_key("RS256", b"key")


def test_es384_keys_are_parsed_on_p384() -> None:
    private_der, public_der = generate_ec_keys(ec.SECP384R1())

    signing = encoding_key(Algorithm.ES384, private_der)
    verification = decoding_key(Algorithm.ES384, public_der)

    assert isinstance(signing.curve, ec.SECP384R1)
    assert isinstance(verification.curve, ec.SECP384R1)


@pytest.mark.parametrize(
    "algorithm, curve",
    [
        (Algorithm.ES384, ec.SECP256R1()),
        (Algorithm.ES256, ec.SECP384R1()),
    ],
)
def test_ec_key_on_wrong_curve_is_rejected(algorithm: Algorithm, curve) -> None:
    private_der, public_der = generate_ec_keys(curve)

    with pytest.raises(SerializationError, match="requires curve"):
        encoding_key(algorithm, private_der)
    with pytest.raises(ValidationError, match=f"invalid {algorithm} verification key"):
        decoding_key(algorithm, public_der)
    with pytest.raises(ValidationError):
        decoding_key(algorithm, private_der)


def test_algorithm_may_be_given_by_name() -> None:
    private_der, public_der = generate_ec_keys()

    assert encoding_key("HS256", b"secret") == b"secret"
    assert decoding_key("HS256", b"secret") == b"secret"
    assert isinstance(encoding_key("ES256", private_der), ec.EllipticCurvePrivateKey)
    assert isinstance(decoding_key("ES256", public_der), ec.EllipticCurvePublicKey)


def test_key_must_be_bytes() -> None:
    with pytest.raises(SerializationError, match="key must be bytes"):
        encoding_key(Algorithm.HS256, "secret")
    with pytest.raises(ValidationError, match="key must be bytes"):
        decoding_key(Algorithm.HS256, "secret")


def test_bytearray_key_is_accepted() -> None:
    assert encoding_key(Algorithm.HS256, bytearray(b"secret")) == b"secret"
