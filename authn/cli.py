"""Command line interface for issuing and inspecting authentication tokens."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import NoReturn, Optional

import typer

from authn.account import AccountId
from authn.config import load_cli_config
from authn.errors import AuthnError, ConfigurationError
from authn.expiry import extract_expiry
from authn.tokens import TokenBuilder, decode_jws_compact, parse_jws_compact

app = typer.Typer(help="Issue, verify and decode account authentication tokens")


def _config_option() -> Optional[Path]:
    return typer.Option(
        None,
        "--config",
        "-c",
        help="Config to use, defaults to $AUTHN_CONFIG or ~/.svc/authn/cli.toml",
    )


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main() -> None:
    """authn CLI entry point."""
    pass


@app.command("sign")
def sign(
    account_id: str = typer.Option(
        ..., "--account-id", "-a", help="Account id to issue the token for"
    ),
    expires_in: Optional[int] = typer.Option(
        None, "--expires-in", help="Number of seconds before the token expires"
    ),
    expires_at: Optional[str] = typer.Option(
        None,
        "--expires-at",
        help="When the token expires: YYYY-MM-DD or YYYY-MM-DD hh:mm:ss",
    ),
    cross_audience: Optional[str] = typer.Option(
        None, "--cross-audience", help="Audience the token is forwarded to"
    ),
    config: Optional[Path] = _config_option(),
) -> None:
    """
    Create a new signed token.

    The signing settings are taken from the config section named after the
    account's audience. With --cross-audience the token audience becomes
    ``<audience>:<cross-audience>`` while the account label is kept.

    Example:
        authn sign --account-id alice.example.com --expires-in 3600
        authn sign -a alice.example.com --expires-at 2030-01-01 --cross-audience other.com
    """
    if expires_in is not None and expires_at is not None:
        _fail("--expires-in and --expires-at cannot be used together")

    try:
        account = AccountId.parse(account_id)
        cli_config = load_cli_config(config)
        lifetime = extract_expiry(expires_in, expires_at, cli_config)
        audience_config = cli_config.audience_config(account.audience)

        builder = (
            TokenBuilder()
            .issuer(audience_config.iss)
            .subject(account)
            .key(audience_config.algorithm, audience_config.sign_key)
            .expires_in(lifetime)
        )
        if cross_audience:
            builder = builder.cross_audience(cross_audience)
        token = builder.build()
    except AuthnError as err:
        _fail(f"Error creating a token: {err}")

    typer.echo(token)


@app.command("verify")
def verify(
    token: str = typer.Argument(..., help="Token to verify"),
    config: Optional[Path] = _config_option(),
) -> None:
    """
    Verify that a token is valid and not expired.

    Example:
        authn verify eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9...
    """
    try:
        cli_config = load_cli_config(config)
        unverified = parse_jws_compact(token)
        audience_config = cli_config.audience_config(unverified.audience)
        claims = decode_jws_compact(
            token,
            audience_config.algorithm,
            audience_config.verify_key,
            issuer=audience_config.iss,
        )
    except ConfigurationError as err:
        _fail(str(err))
    except AuthnError as err:
        _fail(f"Failed to decode token: {err}")

    if claims.expiration_time is None:
        typer.echo("Verification passed, token never expires")
        return
    remaining = claims.expiration_time - int(datetime.now(timezone.utc).timestamp())
    typer.echo(f"Verification passed, token valid for {remaining} seconds")


@app.command("decode")
def decode(token: str = typer.Argument(..., help="Token to decode")) -> None:
    """Print token claims as JSON without verifying the signature."""
    try:
        claims = parse_jws_compact(token)
    except AuthnError as err:
        _fail(f"Error decoding token: {err}")
    typer.echo(claims.to_json())


if __name__ == "__main__":  # pragma: no cover
    app()
