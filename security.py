"""
Identity resolution for login.

Login trusts whatever identifier the local user types. The `AuthProvider`
protocol keeps that decision out of the reducer so a verifying backend can
replace `TrustedIdentityProvider` later.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_DELAY_SECONDS = 0.5


class AuthenticationError(Exception):
    """Raised when an identifier cannot be accepted as a login identity."""


class AuthProvider(Protocol):
    login_delay_seconds: float

    def resolve(self, identifier: str | None) -> str: ...


class TrustedIdentityProvider:
    """Accepts any non-empty identifier as authoritative."""

    def __init__(self, login_delay_seconds: float = DEFAULT_LOGIN_DELAY_SECONDS) -> None:
        self.login_delay_seconds = max(login_delay_seconds, 0.0)

    def resolve(self, identifier: str | None) -> str:
        wx_id = (identifier or "").strip()
        if not wx_id:
            raise AuthenticationError("请输入微信号")
        logger.debug("Accepting identifier '%s' without verification.", wx_id)
        return wx_id


__all__ = ["AuthProvider", "AuthenticationError", "TrustedIdentityProvider"]
