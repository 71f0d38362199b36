# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, func, select

from medcourier.domain.auth.repositories import LoginAttemptStore
from medcourier.domain.enums import UserType
from medcourier.infrastructure.db.models import LoginAttempt, as_utc
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope
from medcourier.shared.config import AppConfig
from medcourier.shared.logging import logger


class SqlAlchemyLoginAttemptStore(LoginAttemptStore):
    """Lockout state derived from persisted login attempts.

    An account is locked when the failures inside the trailing window reach
    ``max_attempts`` and the most recent failure is younger than the lockout
    duration. A successful login deletes the failures of the window.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        max_attempts: int = 5,
        window: timedelta = timedelta(minutes=15),
        lockout: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._session_factory = session_factory
        self._max_attempts = max_attempts
        self._window = window
        self._lockout = lockout
        self._clock = clock

    @classmethod
    def from_config(cls, session_factory: SessionFactory, config: AppConfig):
        return cls(
            session_factory,
            max_attempts=config.lockout.max_attempts,
            window=timedelta(minutes=config.lockout.window_minutes),
            lockout=timedelta(minutes=config.lockout.duration_minutes),
        )

    def _normalize(self, email: str) -> str:
        return email.strip().lower()

    def failed_attempts(self, email: str, user_type: UserType) -> tuple[int, datetime | None]:
        since = self._clock() - self._window
        with unit_of_work_scope(self._session_factory) as session:
            count, latest = session.execute(
                select(func.count(LoginAttempt.id), func.max(LoginAttempt.created_at)).where(
                    LoginAttempt.email == self._normalize(email),
                    LoginAttempt.user_type == user_type.value,
                    LoginAttempt.success.is_(False),
                    LoginAttempt.created_at >= since,
                )
            ).one()
        return int(count or 0), as_utc(latest) if latest else None

    def is_locked(self, email: str, user_type: UserType) -> bool:
        count, latest = self.failed_attempts(email, user_type)
        if count < self._max_attempts or latest is None:
            return False
        return self._clock() - latest < self._lockout

    def record(
        self, email: str, user_type: UserType, *, success: bool, ip_address: str | None = None
    ) -> None:
        normalized = self._normalize(email)
        now = self._clock()
        with unit_of_work_scope(self._session_factory) as session:
            if success:
                session.execute(
                    delete(LoginAttempt).where(
                        LoginAttempt.email == normalized,
                        LoginAttempt.user_type == user_type.value,
                        LoginAttempt.success.is_(False),
                        LoginAttempt.created_at >= now - self._window,
                    )
                )
            session.add(
                LoginAttempt(
                    email=normalized,
                    user_type=user_type.value,
                    ip_address=ip_address,
                    success=success,
                    created_at=now,
                )
            )

        if not success and self.is_locked(email, user_type):
            logger.warning(
                f"login_attempts: ACCOUNT LOCKED email={normalized} type={user_type.value} "
                f"lockout_duration={int(self._lockout.total_seconds())}s "
                f"ip={ip_address or 'unknown'}"
            )

    def clear(self, email: str, user_type: UserType) -> int:
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                delete(LoginAttempt).where(
                    LoginAttempt.email == self._normalize(email),
                    LoginAttempt.user_type == user_type.value,
                )
            )
            removed = result.rowcount or 0
        logger.info(f"login_attempts: cleared {removed} attempts for email={email}")
        return removed

    def purge_older_than(self, age: timedelta) -> int:
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                delete(LoginAttempt).where(LoginAttempt.created_at < self._clock() - age)
            )
            return result.rowcount or 0

    def locked_accounts(self) -> list[dict[str, object]]:
        since = self._clock() - self._window
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(
                    LoginAttempt.email,
                    LoginAttempt.user_type,
                    func.count(LoginAttempt.id),
                    func.max(LoginAttempt.created_at),
                )
                .where(LoginAttempt.success.is_(False), LoginAttempt.created_at >= since)
                .group_by(LoginAttempt.email, LoginAttempt.user_type)
                .having(func.count(LoginAttempt.id) >= self._max_attempts)
            ).all()

        now = self._clock()
        locked = []
        for email, user_type, count, latest in rows:
            latest = as_utc(latest)
            remaining = self._lockout - (now - latest)
            if remaining.total_seconds() > 0:
                locked.append(
                    {
                        "email": email,
                        "user_type": user_type,
                        "failed_attempts": int(count),
                        "lockout_remaining_seconds": int(remaining.total_seconds()),
                    }
                )
        return locked


__all__ = ["SqlAlchemyLoginAttemptStore"]
