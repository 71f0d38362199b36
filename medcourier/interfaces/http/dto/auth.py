# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pydantic import BaseModel, Field

from medcourier.domain.enums import UserType

from .common import Email, Password, Phone, Text


class DriverSignupDTO(BaseModel):
    email: Email
    password: Password
    name: Text
    phone: Phone | None = None


class ShipperSignupDTO(BaseModel):
    email: Email
    password: Password
    name: Text
    company_name: Text | None = None
    phone: Phone | None = None


class LoginDTO(BaseModel):
    email: Email
    # No strength rule on login, only presence.
    password: str = Field(min_length=1, max_length=128)


class ForgotPasswordDTO(BaseModel):
    email: Email


class ResetPasswordDTO(BaseModel):
    token: str = Field(min_length=1, max_length=128)
    password: Password


class ChangePasswordDTO(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: Password


class LockoutClearDTO(BaseModel):
    email: Email
    user_type: UserType
