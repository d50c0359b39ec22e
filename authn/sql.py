"""SQLAlchemy column type storing :class:`~authn.account.AccountId` values."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.types import String, TypeDecorator

from .account import AccountId


class AccountIdType(TypeDecorator):
    """Persist an account id in its canonical ``label.audience`` form."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, str):
            value = AccountId.parse(value)
        return str(value.as_account_id())

    def process_result_value(
        self, value: Optional[str], dialect: Any
    ) -> Optional[AccountId]:
        if value is None:
            return None
        return AccountId.parse(value)


__all__ = ["AccountIdType"]
