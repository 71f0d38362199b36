# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from medcourier.domain.enums import UserType

from .entities import Account, NewAccount, ResetTokenValidation


class AccountRepository(Protocol):
    def find_by_email(self, email: str, user_type: UserType) -> Account | None: ...
    def find_by_id(self, user_id: str, user_type: UserType) -> Account | None: ...
    def add(self, account: NewAccount) -> Account: ...
    def update_password(self, user_id: str, user_type: UserType, password_hash: str) -> None: ...


class LoginAttemptStore(Protocol):
    def is_locked(self, email: str, user_type: UserType) -> bool: ...
    def record(
        self, email: str, user_type: UserType, *, success: bool, ip_address: str | None = None
    ) -> None: ...
    def clear(self, email: str, user_type: UserType) -> int: ...


class ResetTokenStore(Protocol):
    def create(self, user_id: str, user_type: UserType) -> str: ...
    def validate(self, token: str) -> ResetTokenValidation: ...
    def mark_used(self, token: str) -> bool: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, body: str) -> None: ...
