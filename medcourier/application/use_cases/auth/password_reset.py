# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.auth.repositories import (
    AccountRepository,
    LoginAttemptStore,
    Mailer,
    PasswordHasher,
    ResetTokenStore,
)
from medcourier.domain.enums import UserType
from medcourier.shared.errors import ValidationError
from medcourier.shared.logging import logger

FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with that email, a password reset email has been sent."
)
_INVALID_TOKEN = "Invalid or expired reset token"


def _invalid_token() -> ValidationError:
    return ValidationError(_INVALID_TOKEN, errors=[{"field": "token", "message": _INVALID_TOKEN}])


class ForgotPasswordUseCase:
    def __init__(
        self,
        *,
        accounts: AccountRepository,
        tokens: ResetTokenStore,
        mailer: Mailer,
        public_base_url: str,
    ) -> None:
        self._accounts = accounts
        self._tokens = tokens
        self._mailer = mailer
        self._public_base_url = public_base_url.rstrip("/")

    def execute(self, email: str, user_type: UserType) -> dict[str, object]:
        """Same answer whether or not the account exists."""

        account = self._accounts.find_by_email(email, user_type)
        if account is not None:
            token = self._tokens.create(account.id, user_type)
            link = f"{self._public_base_url}/{user_type.value}/reset-password?token={token}"
            self._mailer.send(
                to=account.email,
                subject="Reset your MedCourier password",
                body=(
                    f"Hello {account.name},\n\n"
                    f"Use the link below to choose a new password:\n{link}\n\n"
                    "If you did not ask for this, you can ignore this message."
                ),
            )
        else:
            logger.info(f"auth.forgot_password: no {user_type.value} account for request")
        return {"success": True, "message": FORGOT_PASSWORD_MESSAGE}


class ResetPasswordUseCase:
    def __init__(
        self,
        *,
        accounts: AccountRepository,
        tokens: ResetTokenStore,
        attempts: LoginAttemptStore,
        password_hasher: PasswordHasher,
    ) -> None:
        self._accounts = accounts
        self._tokens = tokens
        self._attempts = attempts
        self._password_hasher = password_hasher

    def execute(self, token: str, new_password: str, user_type: UserType) -> None:
        validation = self._tokens.validate(token)
        if not validation.valid or validation.user_id is None:
            raise _invalid_token()
        if validation.user_type is not user_type:
            logger.warning(
                f"auth.reset_password: {validation.user_type} token presented to "
                f"{user_type.value} reset"
            )
            raise _invalid_token()

        account = self._accounts.find_by_id(validation.user_id, user_type)
        if account is None:
            raise _invalid_token()
        if not self._tokens.mark_used(token):
            logger.warning("auth.reset_password: token was spent by a concurrent request")
            raise _invalid_token()

        self._accounts.update_password(
            account.id, user_type, self._password_hasher.hash(new_password)
        )
        self._attempts.clear(account.email, user_type)
        logger.info(f"auth.reset_password: ok type={user_type.value} user_id={account.id}")


__all__ = ["FORGOT_PASSWORD_MESSAGE", "ForgotPasswordUseCase", "ResetPasswordUseCase"]
