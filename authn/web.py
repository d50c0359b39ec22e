"""FastAPI dependencies authenticating requests by bearer token.

Usage:
    extract_account = AccountIdExtractor(load_trust_config("trust.toml"))

    @app.get("/me")
    async def me(account: AccountId = Depends(extract_account)) -> str:
        return str(account)
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from .account import AccountId
from .bearer import Token, parse_bearer_token
from .errors import AuthnError
from .jose import ConfigMap
from .tokens import extract_from_header

logger = logging.getLogger(__name__)


def _missing_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN, detail="missing authentication token"
    )


def _rejected(err: AuthnError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(err),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def bearer_token(authorization: Optional[str] = Header(default=None)) -> Token:
    """Return the unverified bearer token of the request."""
    if authorization is None:
        raise _missing_token()
    try:
        return Token(parse_bearer_token(authorization))
    except AuthnError as err:
        raise _rejected(err) from err


class AccountIdExtractor:
    """Dependency yielding the account authenticated by the request's token."""

    def __init__(self, config: ConfigMap) -> None:
        self.config = config

    async def __call__(
        self, authorization: Optional[str] = Header(default=None)
    ) -> AccountId:
        if authorization is None:
            raise _missing_token()
        try:
            claims = extract_from_header(authorization, self.config)
        except AuthnError as err:
            logger.info(f"Rejected request token: {err}")
            raise _rejected(err) from err
        return AccountId.from_claims(claims)


__all__ = ["AccountIdExtractor", "bearer_token"]
