# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Request validation.

Bodies are validated with pydantic in strict JSON mode: a field either arrives
with the declared JSON type or fails, so ``"12"`` never silently becomes ``12``.
Every offending field is reported, in input order, as ``{field, message}``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError

M = TypeVar("M", bound=BaseModel)


@dataclass(slots=True, frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(slots=True, frozen=True)
class ValidationSuccess(Generic[M]):
    data: M
    ok: bool = True


@dataclass(slots=True, frozen=True)
class ValidationFailure:
    errors: list[FieldError] = field(default_factory=list)
    ok: bool = False


ValidationResult = ValidationSuccess[M] | ValidationFailure


def format_pydantic_errors(exc: PydanticValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None)
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append(FieldError(field=field_path or "body", message=message))
    return errors


def validate(schema: type[M], raw: bytes | str | Mapping[str, Any] | None) -> ValidationResult:
    if raw is None or raw == b"" or raw == "":
        raw = "{}"
    elif isinstance(raw, Mapping):
        raw = json.dumps(raw, default=str)
    try:
        data = schema.model_validate_json(raw, strict=True)
    except PydanticValidationError as exc:
        return ValidationFailure(errors=format_pydantic_errors(exc))
    return ValidationSuccess(data=data)


def raise_validation_error(failure: ValidationFailure) -> None:
    raise ValidationError(errors=[error.to_dict() for error in failure.errors])


def parse_body(schema: type[M]) -> M:
    result = validate(schema, request.get_data(cache=True))
    if isinstance(result, ValidationFailure):
        raise_validation_error(result)
    return result.data  # type: ignore[union-attr]


def parse_query(schema: type[M]) -> M:
    """Query strings are untyped by nature, so they are validated in lax mode."""

    try:
        return schema.model_validate(request.args.to_dict())
    except PydanticValidationError as exc:
        raise ValidationError(
            errors=[error.to_dict() for error in format_pydantic_errors(exc)]
        ) from exc


__all__ = [
    "FieldError",
    "ValidationFailure",
    "ValidationResult",
    "ValidationSuccess",
    "format_pydantic_errors",
    "parse_body",
    "parse_query",
    "raise_validation_error",
    "validate",
]
