# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.auth.repositories import AccountRepository, PasswordHasher
from medcourier.domain.enums import UserType
from medcourier.shared.errors import NotFoundError, ValidationError
from medcourier.shared.logging import logger


class ChangePasswordUseCase:
    def __init__(self, *, accounts: AccountRepository, password_hasher: PasswordHasher) -> None:
        self._accounts = accounts
        self._password_hasher = password_hasher

    def execute(
        self, user_id: str, user_type: UserType, current_password: str, new_password: str
    ) -> None:
        account = self._accounts.find_by_id(user_id, user_type)
        if account is None:
            raise NotFoundError(user_type.value.capitalize())
        if not self._password_hasher.verify(current_password, account.password_hash):
            message = "Current password is incorrect"
            raise ValidationError(
                message, errors=[{"field": "current_password", "message": message}]
            )
        hashed = self._password_hasher.hash(new_password)
        self._accounts.update_password(user_id, user_type, hashed)
        logger.info(f"auth.change_password: ok type={user_type.value} user_id={user_id}")


__all__ = ["ChangePasswordUseCase"]
