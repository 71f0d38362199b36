# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Flask, Response, g, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from medcourier.domain.exceptions import InvariantViolationError
from medcourier.shared.config import load_config
from medcourier.shared.logging import logger

from .base import (
    AppError,
    AuthenticationError,
    ConflictError,
    RateLimitError,
    ValidationError,
    utc_timestamp,
)

SESSION_COOKIE_NAME = "auth_session"

_HTTP_KINDS: dict[int, str] = {
    400: "ValidationError",
    401: "AuthenticationError",
    403: "AuthorizationError",
    404: "NotFoundError",
    405: "MethodNotAllowed",
    409: "ConflictError",
    413: "PayloadTooLarge",
    415: "UnsupportedMediaType",
    429: "RateLimitError",
}


def translate_error(
    exc: BaseException, *, production: bool
) -> tuple[dict[str, Any], int, dict[str, str]]:
    """Map any exception raised by a route to ``(envelope, status, headers)``."""

    headers: dict[str, str] = {}

    if isinstance(exc, IntegrityError):
        exc = ConflictError("A record with this value already exists")
    elif isinstance(exc, InvariantViolationError):
        exc = ValidationError(
            exc.args[0], errors=[{"field": exc.field or "body", "message": exc.args[0]}]
        )

    if isinstance(exc, AppError):
        if isinstance(exc, RateLimitError):
            headers["Retry-After"] = str(exc.retry_after)
        return exc.to_dict(), int(exc.status), headers

    if isinstance(exc, HTTPException):
        status = exc.code or HTTPStatus.INTERNAL_SERVER_ERROR
        payload = {
            "error": _HTTP_KINDS.get(int(status), "HTTPError"),
            "message": exc.description or HTTPStatus(status).phrase,
            "timestamp": utc_timestamp(),
        }
        return payload, int(status), headers

    message = "An internal server error occurred"
    if not production and str(exc):
        message = str(exc)
    payload = {
        "error": "InternalServerError",
        "message": message,
        "timestamp": utc_timestamp(),
    }
    return payload, int(HTTPStatus.INTERNAL_SERVER_ERROR), headers


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _render(exc: BaseException) -> Response:
    config = load_config()
    payload, status, headers = translate_error(exc, production=config.is_production())
    response = jsonify(payload)
    response.status_code = status
    for key, value in headers.items():
        response.headers[key] = value
    if isinstance(exc, AuthenticationError) and exc.clear_session:
        response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return response


def register_error_handler(app: Flask) -> None:
    config = load_config()
    debug_mode = config.debug_logging

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        logger.info(
            f"Handled {exc.kind} ({int(exc.status)}) on {request.method} {request.path}"
        )
        return _render(exc)

    @app.errorhandler(IntegrityError)
    def _handle_integrity(exc: IntegrityError):
        logger.warning(f"Integrity error on {request.method} {request.path}")
        return _render(exc)

    @app.errorhandler(InvariantViolationError)
    def _handle_invariant(exc: InvariantViolationError):
        logger.info(f"Rejected by domain rule on {request.method} {request.path}: {exc}")
        return _render(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        return _render(exc)

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        principal = getattr(g, "principal", None)
        user_id = getattr(principal, "user_id", None)

        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"from {_client_ip()}, user={user_id}, "
                f"query={dict(request.args)}, body_size={len(request.data)}"
            )
        else:
            logger.error(f"Error: {type(exc).__name__} on {request.method} {request.path}")

        return _render(exc)


__all__ = ["SESSION_COOKIE_NAME", "register_error_handler", "translate_error"]
