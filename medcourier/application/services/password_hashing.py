# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from medcourier.domain.auth.repositories import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted scrypt hashes; werkzeug compares digests in constant time."""

    def __init__(self) -> None:
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        return str(generate_password_hash(password))

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        return bool(check_password_hash(hashed, password))

    def burn(self, password: str) -> None:
        """Spend one verification on a throwaway hash.

        Called when the account does not exist so that unknown and known
        e-mails take comparable time.
        """

        if self._dummy_hash is None:
            self._dummy_hash = self.hash("not-a-real-password")
        check_password_hash(self._dummy_hash, password)
