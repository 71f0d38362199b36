# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, AwareDatetime, Field
from pydantic_core import PydanticCustomError

from medcourier.shared.errors.validation_types import ValidationErrorType

MIN_PASSWORD_LENGTH = 8

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE = re.compile(r"^\+?[0-9 ().-]{7,20}$")


def _check_email(value: str) -> str:
    value = value.strip().lower()
    if not _EMAIL.match(value):
        raise PydanticCustomError(ValidationErrorType.EMAIL_INVALID, "Invalid email address", {})
    return value


def _check_password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_TOO_SHORT,
            "Password must be at least {min_length} characters",
            {"min_length": MIN_PASSWORD_LENGTH},
        )
    return value


def _check_phone(value: str) -> str:
    value = value.strip()
    if not _PHONE.match(value):
        raise PydanticCustomError(ValidationErrorType.PHONE_INVALID, "Invalid phone number", {})
    return value


def _check_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError(ValidationErrorType.BLANK, "This field cannot be blank", {})
    return value


def _to_utc(value: datetime) -> datetime:
    return value.astimezone(UTC)


Email = Annotated[str, Field(max_length=254), AfterValidator(_check_email)]
Password = Annotated[str, Field(max_length=128), AfterValidator(_check_password)]
Phone = Annotated[str, AfterValidator(_check_phone)]
Text = Annotated[str, Field(max_length=500), AfterValidator(_check_text)]
LongText = Annotated[str, Field(max_length=5000), AfterValidator(_check_text)]
Id = Annotated[str, Field(min_length=1, max_length=64)]
# Timestamps must carry an offset and are stored as UTC.
UtcDatetime = Annotated[AwareDatetime, AfterValidator(_to_utc)]

__all__ = [
    "Email",
    "Id",
    "LongText",
    "MIN_PASSWORD_LENGTH",
    "Password",
    "Phone",
    "Text",
    "UtcDatetime",
]
