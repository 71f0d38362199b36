# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta

from medcourier.domain.enums import UserType
from medcourier.infrastructure.auth.login_attempts import SqlAlchemyLoginAttemptStore
from medcourier.infrastructure.auth.password_reset import SqlAlchemyResetTokenStore
from medcourier.shared.logging import logger


class ClearLockoutUseCase:
    def __init__(self, attempts: SqlAlchemyLoginAttemptStore) -> None:
        self._attempts = attempts

    def execute(self, email: str, user_type: UserType) -> int:
        removed = self._attempts.clear(email, user_type)
        logger.info(f"admin: cleared lockout type={user_type.value} removed={removed}")
        return removed


class ListLockedAccountsUseCase:
    def __init__(self, attempts: SqlAlchemyLoginAttemptStore) -> None:
        self._attempts = attempts

    def execute(self) -> list[dict[str, object]]:
        return self._attempts.locked_accounts()


class CleanupAuthUseCase:
    """Purge login attempts past retention and spent reset tokens."""

    def __init__(
        self,
        *,
        attempts: SqlAlchemyLoginAttemptStore,
        tokens: SqlAlchemyResetTokenStore,
        retention: timedelta = timedelta(days=30),
    ) -> None:
        self._attempts = attempts
        self._tokens = tokens
        self._retention = retention

    def execute(self) -> dict[str, int]:
        result = {
            "login_attempts": self._attempts.purge_older_than(self._retention),
            "reset_tokens": self._tokens.purge_spent(),
        }
        logger.info(
            f"admin.cleanup_auth: removed attempts={result['login_attempts']} "
            f"tokens={result['reset_tokens']}"
        )
        return result


__all__ = ["CleanupAuthUseCase", "ClearLockoutUseCase", "ListLockedAccountsUseCase"]
