# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from http import HTTPStatus
from typing import Any


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(slots=True)
class AppError(Exception):
    kind: str
    status: HTTPStatus
    message: str
    details: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.kind,
            "message": self.message,
            "timestamp": utc_timestamp(),
        }
        if self.details:
            payload["details"] = dict(self.details)
        return payload


class ValidationError(AppError):
    def __init__(
        self,
        message: str = "Validation failed",
        *,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        self.errors = list(errors or [])
        super().__init__(
            kind="ValidationError",
            status=HTTPStatus.BAD_REQUEST,
            message=message,
            details={"errors": self.errors} if self.errors else None,
        )


class AuthenticationError(AppError):
    def __init__(
        self, message: str = "Authentication required", *, clear_session: bool = False
    ) -> None:
        self.clear_session = clear_session
        super().__init__(
            kind="AuthenticationError",
            status=HTTPStatus.UNAUTHORIZED,
            message=message,
        )


class AuthorizationError(AppError):
    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(
            kind="AuthorizationError",
            status=HTTPStatus.FORBIDDEN,
            message=message,
        )


class NotFoundError(AppError):
    def __init__(self, resource: str = "Resource") -> None:
        self.resource = resource
        super().__init__(
            kind="NotFoundError",
            status=HTTPStatus.NOT_FOUND,
            message=f"{resource} not found",
        )


class ConflictError(AppError):
    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            kind="ConflictError",
            status=HTTPStatus.CONFLICT,
            message=message,
            details=details,
        )


class RateLimitError(AppError):
    def __init__(self, message: str = "Too many requests", *, retry_after: int = 1) -> None:
        self.retry_after = max(1, int(retry_after))
        super().__init__(
            kind="RateLimitError",
            status=HTTPStatus.TOO_MANY_REQUESTS,
            message=message,
            details={"retry_after_seconds": self.retry_after},
        )


class InternalError(AppError):
    def __init__(self, message: str = "An internal server error occurred") -> None:
        super().__init__(
            kind="InternalServerError",
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            message=message,
        )
