# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .base import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from .http import register_error_handler, translate_error

__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "RateLimitError",
    "ValidationError",
    "register_error_handler",
    "translate_error",
]
