# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from medcourier.domain.auth.entities import Principal
from medcourier.domain.auth.repositories import AccountRepository
from medcourier.infrastructure.auth.session_cookie import SessionCookieCodec
from medcourier.shared.logging import logger


@dataclass(slots=True, frozen=True)
class SessionState:
    principal: Principal | None
    stale: bool = False

    @property
    def authenticated(self) -> bool:
        return self.principal is not None


class ResolveSessionUseCase:
    """Turn the raw cookie into a principal, re-checking the account store.

    ``stale`` is set when the cookie was well-formed and unexpired but its
    account no longer exists, so the caller should delete the cookie.
    """

    def __init__(self, *, accounts: AccountRepository, sessions: SessionCookieCodec) -> None:
        self._accounts = accounts
        self._sessions = sessions

    def execute(self, cookie_value: str | None) -> SessionState:
        session = self._sessions.decode(cookie_value)
        if session is None:
            return SessionState(principal=None, stale=bool(cookie_value))

        account = self._accounts.find_by_id(session.user_id, session.user_type)
        if account is None:
            logger.info(
                f"auth.session: account vanished type={session.user_type.value} "
                f"user_id={session.user_id}"
            )
            return SessionState(principal=None, stale=True)
        return SessionState(principal=Principal.from_account(account))


__all__ = ["ResolveSessionUseCase", "SessionState"]
