# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redaction applied to every log message before it reaches a sink."""

from __future__ import annotations

import re
from typing import Any

_MASK = "***REDACTED***"

# Keys whose value is masked in ``key=value`` / ``key: value`` fragments.
_SECRET_KEYS = (
    r"password(?:_hash)?",
    r"new_password",
    r"current_password",
    r"api[_-]?key",
    r"secret[_-]?key",
    r"cron[_-]?secret",
    r"(?:reset_)?token",
    r"auth_session",
    r"(?:account|routing)[_-]?number",
    r"key",
)

_ASSIGNMENT = re.compile(
    r"\b(" + "|".join(_SECRET_KEYS) + r")(\s*[:=]\s*['\"]?)([^\s'\",;&]+)",
    re.IGNORECASE,
)

_CREDENTIAL_HEADERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"(authorization\s*:\s*)(?:(?:bearer|basic)\s+)?\S+", re.IGNORECASE),
        r"\1" + _MASK,
    ),
    (re.compile(r"(bearer\s+)[\w\-.~+/]+=*", re.IGNORECASE), r"\1" + _MASK),
)

_PERSONAL_DATA: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"\b(postgres(?:ql)?|mysql|sqlite)(\+\w+)?://([^:/@\s]+):([^@\s]+)@"),
        r"\1\2://\3:" + _MASK + "@",
    ),
    (re.compile(r"[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,})"), r"***@\1"),
    (re.compile(r"\+?\d{1,3}[- ]?\(?\d{3}\)?[- ]?\d{3}[- ]?\d{4}\b"), "+***-***-****"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _CREDENTIAL_HEADERS:
        message = pattern.sub(replacement, message)
    message = _ASSIGNMENT.sub(lambda m: f"{m.group(1)}{m.group(2)}{_MASK}", message)
    for pattern, replacement in _PERSONAL_DATA:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: masks the message in place and never drops a record."""
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True
