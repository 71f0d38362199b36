# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, or_, select, update

from medcourier.domain.auth.entities import ResetTokenValidation
from medcourier.domain.auth.repositories import ResetTokenStore
from medcourier.domain.enums import UserType
from medcourier.infrastructure.db.models import PasswordResetToken, as_utc
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope
from medcourier.shared.logging import logger


class SqlAlchemyResetTokenStore(ResetTokenStore):
    """Single-use, time-bounded password reset tokens."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._session_factory = session_factory
        self._ttl = ttl
        self._clock = clock

    def create(self, user_id: str, user_type: UserType) -> str:
        token = secrets.token_hex(32)
        now = self._clock()
        with unit_of_work_scope(self._session_factory) as session:
            session.execute(
                update(PasswordResetToken)
                .where(
                    PasswordResetToken.user_id == user_id,
                    PasswordResetToken.user_type == user_type.value,
                    PasswordResetToken.used.is_(False),
                )
                .values(used=True)
            )
            session.add(
                PasswordResetToken(
                    token=token,
                    user_id=user_id,
                    user_type=user_type.value,
                    expires_at=now + self._ttl,
                    used=False,
                    created_at=now,
                )
            )
        logger.info(f"password_reset: issued token for {user_type.value} user_id={user_id}")
        return token

    def validate(self, token: str) -> ResetTokenValidation:
        if not token:
            return ResetTokenValidation(valid=False)

        with unit_of_work_scope(self._session_factory) as session:
            row = session.execute(
                select(PasswordResetToken).where(PasswordResetToken.token == token)
            ).scalar_one_or_none()
            if row is None or row.used:
                return ResetTokenValidation(valid=False)
            if as_utc(row.expires_at) <= self._clock():
                row.used = True
                return ResetTokenValidation(valid=False)
            return ResetTokenValidation(
                valid=True, user_id=row.user_id, user_type=UserType(row.user_type)
            )

    def mark_used(self, token: str) -> bool:
        """Consume ``token``; False when another request already spent it."""

        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                update(PasswordResetToken)
                .where(
                    PasswordResetToken.token == token,
                    PasswordResetToken.used.is_(False),
                )
                .values(used=True)
            )
            return (result.rowcount or 0) == 1

    def purge_spent(self) -> int:
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                delete(PasswordResetToken).where(
                    or_(
                        PasswordResetToken.used.is_(True),
                        PasswordResetToken.expires_at < self._clock(),
                    )
                )
            )
            return result.rowcount or 0


__all__ = ["SqlAlchemyResetTokenStore"]
