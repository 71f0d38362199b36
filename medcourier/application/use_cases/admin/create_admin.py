# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.auth.entities import Account, NewAccount
from medcourier.domain.auth.repositories import AccountRepository, PasswordHasher
from medcourier.domain.enums import UserType
from medcourier.shared.errors import ConflictError
from medcourier.shared.logging import logger


class CreateAdminUseCase:
    def __init__(self, *, accounts: AccountRepository, password_hasher: PasswordHasher) -> None:
        self._accounts = accounts
        self._password_hasher = password_hasher

    def execute(self, email: str, name: str, password: str) -> Account:
        if self._accounts.find_by_email(email, UserType.ADMIN) is not None:
            raise ConflictError("An admin with this email already exists")
        account = self._accounts.add(
            NewAccount(
                user_type=UserType.ADMIN,
                email=email,
                password_hash=self._password_hasher.hash(password),
                name=name,
            )
        )
        logger.info(f"admin: created admin user_id={account.id}")
        return account


__all__ = ["CreateAdminUseCase"]
