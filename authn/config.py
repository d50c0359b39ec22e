"""Configuration files for the command line and for token verification."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError
from .jose import Algorithm, ConfigMap, IssuerConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AUTHN_CONFIG"
DEFAULT_CONFIG_FILE = Path(".svc") / "authn" / "cli.toml"
DEFAULT_CONFIG = """\
expires_in = 86400 # one day

[audience."example.com"]
iss = "bar.services"
algorithm = "HS256"
sign_key = "/path/to/keys/bar.private_key.p8.der.sample"
verify_key = "/path/to/keys/bar.public_key.p8.der.sample"
"""


def _read_key(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    path = Path(str(value)).expanduser()
    try:
        return path.read_bytes()
    except OSError as err:
        raise ValueError(f"cannot read key file {path}: {err.strerror}") from err


def _parse_algorithm(value: Any) -> Algorithm:
    try:
        return Algorithm.parse(value)
    except ConfigurationError as err:
        raise ValueError(str(err)) from err


class AudienceConfig(BaseModel):
    """Signing and verification settings for one audience."""

    iss: str
    algorithm: Algorithm
    sign_key: bytes = Field(..., repr=False, description="Path to the signing key")
    verify_key: bytes = Field(..., repr=False, description="Path to the verify key")

    @field_validator("algorithm", mode="before")
    @classmethod
    def validate_algorithm(cls, value: Any) -> Algorithm:
        return _parse_algorithm(value)

    @field_validator("sign_key", "verify_key", mode="before")
    @classmethod
    def load_keys(cls, value: Any) -> bytes:
        return _read_key(value)


class CliConfig(BaseModel):
    """Top-level command line configuration."""

    expires_in: Optional[int] = None
    audience: Dict[str, AudienceConfig] = Field(default_factory=dict)

    def audience_config(self, audience: str) -> AudienceConfig:
        """Return the settings for the home segment of ``audience``."""
        home = audience.split(":", 1)[0]
        try:
            return self.audience[home]
        except KeyError:
            raise ConfigurationError(
                f"Couldn't find audience: {home} in config"
            ) from None

    def trust_config(self) -> ConfigMap:
        """Build verification settings keyed by issuer from the audiences."""
        trusted: ConfigMap = {}
        for name, entry in self.audience.items():
            current = trusted.get(entry.iss)
            if current is None:
                trusted[entry.iss] = IssuerConfig(
                    audience=frozenset([name]),
                    algorithm=entry.algorithm,
                    key=entry.verify_key,
                )
                continue
            if current.algorithm != entry.algorithm or current.key != entry.verify_key:
                raise ConfigurationError(
                    f"issuer {entry.iss} is configured with different keys"
                )
            trusted[entry.iss] = current.model_copy(
                update={"audience": current.audience | {name}}
            )
        return trusted


class IssuerFileEntry(BaseModel):
    """Issuer section of a verification config file."""

    audience: FrozenSet[str]
    algorithm: Algorithm
    key: bytes = Field(..., repr=False, description="Path to the key")

    @field_validator("algorithm", mode="before")
    @classmethod
    def validate_algorithm(cls, value: Any) -> Algorithm:
        return _parse_algorithm(value)

    @field_validator("key", mode="before")
    @classmethod
    def load_key(cls, value: Any) -> bytes:
        return _read_key(value)


def _read_document(path: Path) -> Dict[str, Any]:
    try:
        if path.suffix in (".yaml", ".yml"):
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        else:
            with open(path, "rb") as f:
                data = tomllib.load(f)
    except OSError as err:
        raise ConfigurationError(f"Failed to read config: {err}") from err
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as err:
        raise ConfigurationError(f"Failed to parse config {path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigurationError(f"Failed to parse config {path}: not a mapping")
    return data


def _bootstrap_default(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_CONFIG)
    except OSError as err:
        raise ConfigurationError(
            f"Tried to create default config at {path}\n"
            f"But something went wrong: {err}"
        ) from err
    logger.info(f"Created default config at {path}")
    raise ConfigurationError(
        f"Created a config for you at {path}\n"
        "But you must add some audiences, exiting."
    )


def load_cli_config(path: Optional[str | Path] = None) -> CliConfig:
    """Load the command line configuration.

    Args:
        path: Optional path to config file. Falls back to the AUTHN_CONFIG env
            variable or ``~/.svc/authn/cli.toml``. A missing default file is
            created with sample content and reported as an error.
    """

    explicit = path or os.getenv(CONFIG_ENV_VAR)
    if explicit:
        config_path = Path(explicit).expanduser()
        if not config_path.exists():
            raise ConfigurationError(f"Config file {config_path} does not exist")
    else:
        config_path = Path.home() / DEFAULT_CONFIG_FILE
        if not config_path.exists():
            _bootstrap_default(config_path)

    data = _read_document(config_path)
    try:
        return CliConfig(**data)
    except PydanticValidationError as err:
        raise ConfigurationError(f"Failed to deserialize config: {err}") from err


def load_trust_config(path: str | Path) -> ConfigMap:
    """Load issuer trust settings from a TOML or YAML file.

    Each top-level table is named after an issuer and holds ``audience``
    (list of allowed audiences), ``algorithm`` and ``key`` (path to the
    HMAC secret or DER-encoded public key).
    """

    data = _read_document(Path(path).expanduser())
    trusted: ConfigMap = {}
    for issuer, entry in data.items():
        try:
            parsed = IssuerFileEntry.model_validate(entry)
        except PydanticValidationError as err:
            raise ConfigurationError(
                f"Failed to deserialize issuer {issuer}: {err}"
            ) from err
        trusted[issuer] = IssuerConfig(
            audience=parsed.audience, algorithm=parsed.algorithm, key=parsed.key
        )
    return trusted


__all__ = [
    "AudienceConfig",
    "CliConfig",
    "load_cli_config",
    "load_trust_config",
]
