# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Encrypted ``auth_session`` cookie.

The cookie is the only session state. Its payload is sealed with Fernet
(AES-CBC + HMAC) under a key derived from ``SECRET_KEY``, so it can be neither
read nor altered client-side, and Fernet's own timestamp bounds its lifetime.
"""

from __future__ import annotations

import base64
import hashlib
import json
from datetime import UTC, datetime, timedelta
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from flask import Request, Response

from medcourier.domain.auth.entities import AuthSession
from medcourier.domain.enums import UserType
from medcourier.shared.config import AppConfig
from medcourier.shared.logging import logger

COOKIE_NAME = "auth_session"
_KEY_CONTEXT = b"medcourier:auth-session:v1"


def derive_key(secret_key: str) -> bytes:
    digest = hashlib.sha256(_KEY_CONTEXT + secret_key.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class SessionCookieCodec:
    def __init__(self, secret_key: str, *, duration: timedelta) -> None:
        self._fernet = Fernet(derive_key(secret_key))
        self._duration = duration

    @property
    def duration(self) -> timedelta:
        return self._duration

    def issue(
        self, user_id: str, user_type: UserType, email: str, *, now: datetime | None = None
    ) -> tuple[AuthSession, str]:
        issued_at = now or datetime.now(UTC)
        session = AuthSession(
            user_id=user_id,
            user_type=user_type,
            email=email,
            issued_at=issued_at,
            expires_at=issued_at + self._duration,
        )
        return session, self.encode(session)

    def encode(self, session: AuthSession) -> str:
        payload = {
            "uid": session.user_id,
            "typ": session.user_type.value,
            "email": session.email,
            "iat": session.issued_at.timestamp(),
            "exp": session.expires_at.timestamp(),
        }
        return self._fernet.encrypt_at_time(
            json.dumps(payload, separators=(",", ":")).encode("utf-8"),
            int(session.issued_at.timestamp()),
        ).decode("ascii")

    def decode(self, value: str | None, *, now: datetime | None = None) -> AuthSession | None:
        if not value:
            return None
        current = now or datetime.now(UTC)
        try:
            raw = self._fernet.decrypt_at_time(
                value.encode("ascii"),
                ttl=int(self._duration.total_seconds()),
                current_time=int(current.timestamp()),
            )
            payload: dict[str, Any] = json.loads(raw)
            session = AuthSession(
                user_id=str(payload["uid"]),
                user_type=UserType(payload["typ"]),
                email=str(payload["email"]),
                issued_at=datetime.fromtimestamp(float(payload["iat"]), UTC),
                expires_at=datetime.fromtimestamp(float(payload["exp"]), UTC),
            )
        except InvalidToken:
            logger.debug("session: rejected tampered or expired cookie")
            return None
        except (KeyError, TypeError, ValueError, UnicodeError):
            logger.debug("session: rejected malformed cookie payload")
            return None

        if session.is_expired(current):
            return None
        return session

    def read(self, request: Request) -> AuthSession | None:
        return self.decode(request.cookies.get(COOKIE_NAME))


def build_session_codec(config: AppConfig) -> SessionCookieCodec:
    return SessionCookieCodec(
        config.secret_key, duration=timedelta(days=config.security.session_duration_days)
    )


def set_session_cookie(response: Response, token: str, config: AppConfig) -> None:
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=config.security.session_duration_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.security.cookie_samesite,
    )


def clear_session_cookie(response: Response, config: AppConfig) -> None:
    response.delete_cookie(
        COOKIE_NAME,
        path="/",
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.security.cookie_samesite,
    )


__all__ = [
    "COOKIE_NAME",
    "SessionCookieCodec",
    "build_session_codec",
    "clear_session_cookie",
    "derive_key",
    "set_session_cookie",
]
