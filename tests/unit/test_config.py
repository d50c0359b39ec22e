"""Tests for configuration loading."""

from pathlib import Path

import pytest

from authn.config import CONFIG_ENV_VAR, load_cli_config, load_trust_config
from authn.errors import ConfigurationError
from authn.jose import Algorithm


def write_keys(tmp_path: Path) -> tuple[Path, Path]:
    sign_key = tmp_path / "sign.key"
    verify_key = tmp_path / "verify.key"
    sign_key.write_bytes(b"sign-secret")
    verify_key.write_bytes(b"verify-secret")
    return sign_key, verify_key


def test_load_cli_config_from_toml(tmp_path):
    sign_key, verify_key = write_keys(tmp_path)
    config_path = tmp_path / "cli.toml"
    config_path.write_text(
        f"""
expires_in = 600

[audience."svc.example.org"]
iss = "iam.example.org"
algorithm = "HS256"
sign_key = "{sign_key}"
verify_key = "{verify_key}"
"""
    )

    config = load_cli_config(config_path)
    assert config.expires_in == 600
    entry = config.audience["svc.example.org"]
    assert entry.iss == "iam.example.org"
    assert entry.algorithm is Algorithm.HS256
    assert entry.sign_key == b"sign-secret"
    assert entry.verify_key == b"verify-secret"


def test_load_cli_config_from_env_yaml(tmp_path, monkeypatch):
    sign_key, verify_key = write_keys(tmp_path)
    config_path = tmp_path / "cli.yaml"
    config_path.write_text(
        f"""
audience:
  svcA:
    iss: issuer1
    algorithm: es256
    sign_key: {sign_key}
    verify_key: {verify_key}
"""
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))

    config = load_cli_config()
    assert config.expires_in is None
    assert config.audience["svcA"].algorithm is Algorithm.ES256


def test_missing_default_config_is_created(tmp_path, monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    with pytest.raises(ConfigurationError, match="Created a config for you"):
        load_cli_config()

    created = tmp_path / ".svc" / "authn" / "cli.toml"
    assert created.exists()
    assert "[audience." in created.read_text()


def test_missing_explicit_config_fails(tmp_path):
    with pytest.raises(ConfigurationError, match="does not exist"):
        load_cli_config(tmp_path / "missing.toml")


def test_unreadable_key_file_fails(tmp_path):
    config_path = tmp_path / "cli.toml"
    config_path.write_text(
        f"""
[audience.svcA]
iss = "issuer1"
algorithm = "HS256"
sign_key = "{tmp_path / 'nope'}"
verify_key = "{tmp_path / 'nope'}"
"""
    )
    with pytest.raises(ConfigurationError, match="cannot read key file"):
        load_cli_config(config_path)


def test_unsupported_algorithm_fails(tmp_path):
    sign_key, verify_key = write_keys(tmp_path)
    config_path = tmp_path / "cli.toml"
    config_path.write_text(
        f"""
[audience.svcA]
iss = "issuer1"
algorithm = "RS256"
sign_key = "{sign_key}"
verify_key = "{verify_key}"
"""
    )
    with pytest.raises(ConfigurationError, match="unsupported algorithm"):
        load_cli_config(config_path)


def test_invalid_toml_fails(tmp_path):
    config_path = tmp_path / "cli.toml"
    config_path.write_text("expires_in = = 3")
    with pytest.raises(ConfigurationError, match="Failed to parse config"):
        load_cli_config(config_path)


def test_audience_config_uses_home_segment(tmp_path):
    sign_key, verify_key = write_keys(tmp_path)
    config_path = tmp_path / "cli.toml"
    config_path.write_text(
        f"""
[audience.svcA]
iss = "issuer1"
algorithm = "HS256"
sign_key = "{sign_key}"
verify_key = "{verify_key}"
"""
    )
    config = load_cli_config(config_path)

    assert config.audience_config("svcA").iss == "issuer1"
    assert config.audience_config("svcA:svcB").iss == "issuer1"
    with pytest.raises(ConfigurationError, match="Couldn't find audience: svcB"):
        config.audience_config("svcB")


def test_trust_config_groups_audiences_by_issuer(tmp_path):
    sign_key, verify_key = write_keys(tmp_path)
    config_path = tmp_path / "cli.toml"
    config_path.write_text(
        f"""
[audience.svcA]
iss = "issuer1"
algorithm = "HS256"
sign_key = "{sign_key}"
verify_key = "{verify_key}"

[audience.svcB]
iss = "issuer1"
algorithm = "HS256"
sign_key = "{sign_key}"
verify_key = "{verify_key}"

[audience.svcC]
iss = "issuer2"
algorithm = "HS384"
sign_key = "{sign_key}"
verify_key = "{verify_key}"
"""
    )
    trusted = load_cli_config(config_path).trust_config()

    assert set(trusted) == {"issuer1", "issuer2"}
    assert trusted["issuer1"].audience == {"svcA", "svcB"}
    assert trusted["issuer1"].key == b"verify-secret"
    assert trusted["issuer2"].algorithm is Algorithm.HS384


def test_load_trust_config(tmp_path):
    _, verify_key = write_keys(tmp_path)
    config_path = tmp_path / "trust.toml"
    config_path.write_text(
        f"""
[issuer1]
audience = ["svcA", "svcB"]
algorithm = "HS256"
key = "{verify_key}"
"""
    )

    trusted = load_trust_config(config_path)
    assert trusted["issuer1"].audience == {"svcA", "svcB"}
    assert trusted["issuer1"].algorithm is Algorithm.HS256
    assert trusted["issuer1"].key == b"verify-secret"


def test_load_trust_config_rejects_incomplete_issuer(tmp_path):
    config_path = tmp_path / "trust.yaml"
    config_path.write_text("issuer1:\n  audience: [svcA]\n")
    with pytest.raises(ConfigurationError, match="issuer1"):
        load_trust_config(config_path)
