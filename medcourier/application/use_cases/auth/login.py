# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from medcourier.application.services.password_hashing import WerkzeugPasswordHasher
from medcourier.domain.auth.entities import Principal
from medcourier.domain.auth.repositories import AccountRepository, LoginAttemptStore
from medcourier.domain.enums import UserType
from medcourier.infrastructure.auth.session_cookie import SessionCookieCodec
from medcourier.shared.errors import AuthenticationError
from medcourier.shared.logging import logger

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(slots=True, frozen=True)
class LoginResult:
    principal: Principal
    token: str


class LoginUseCase:
    """Lockout check, password verification, attempt bookkeeping, cookie.

    Every failure, including a locked account, yields the same generic 401 so
    callers cannot tell which e-mails exist or which accounts are locked.
    """

    def __init__(
        self,
        *,
        accounts: AccountRepository,
        attempts: LoginAttemptStore,
        password_hasher: WerkzeugPasswordHasher,
        sessions: SessionCookieCodec,
    ) -> None:
        self._accounts = accounts
        self._attempts = attempts
        self._password_hasher = password_hasher
        self._sessions = sessions

    def execute(
        self, email: str, password: str, user_type: UserType, ip_address: str | None = None
    ) -> LoginResult:
        if self._attempts.is_locked(email, user_type):
            self._password_hasher.burn(password)
            logger.warning(f"auth.login: locked account type={user_type.value} ip={ip_address}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        account = self._accounts.find_by_email(email, user_type)
        if account is None:
            self._password_hasher.burn(password)
            valid = False
        else:
            valid = self._password_hasher.verify(password, account.password_hash)

        if not valid or account is None:
            self._attempts.record(email, user_type, success=False, ip_address=ip_address)
            logger.info(f"auth.login: rejected type={user_type.value} ip={ip_address}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        self._attempts.record(email, user_type, success=True, ip_address=ip_address)
        _, token = self._sessions.issue(account.id, user_type, account.email)
        logger.info(f"auth.login: ok type={user_type.value} user_id={account.id}")
        return LoginResult(principal=Principal.from_account(account), token=token)


__all__ = ["INVALID_CREDENTIALS", "LoginResult", "LoginUseCase"]
