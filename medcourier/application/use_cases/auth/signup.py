# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.auth.entities import NewAccount, Principal
from medcourier.domain.auth.repositories import AccountRepository, PasswordHasher
from medcourier.domain.enums import UserType
from medcourier.infrastructure.auth.session_cookie import SessionCookieCodec
from medcourier.shared.errors import ConflictError
from medcourier.shared.logging import logger

from .login import LoginResult


class SignupUseCase:
    def __init__(
        self,
        *,
        accounts: AccountRepository,
        password_hasher: PasswordHasher,
        sessions: SessionCookieCodec,
    ) -> None:
        self._accounts = accounts
        self._password_hasher = password_hasher
        self._sessions = sessions

    def execute(
        self,
        user_type: UserType,
        *,
        email: str,
        password: str,
        name: str,
        phone: str | None = None,
        company_name: str | None = None,
    ) -> LoginResult:
        if self._accounts.find_by_email(email, user_type) is not None:
            raise ConflictError("An account with this email already exists")

        account = self._accounts.add(
            NewAccount(
                user_type=user_type,
                email=email,
                password_hash=self._password_hasher.hash(password),
                name=name,
                phone=phone,
                company_name=company_name,
            )
        )
        _, token = self._sessions.issue(account.id, user_type, account.email)
        logger.info(f"auth.signup: ok type={user_type.value} user_id={account.id}")
        return LoginResult(principal=Principal.from_account(account), token=token)


__all__ = ["SignupUseCase"]
