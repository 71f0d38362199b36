# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, jsonify, request

from medcourier.application.use_cases.auth.login import LoginResult, LoginUseCase
from medcourier.application.use_cases.auth.password_reset import (
    ForgotPasswordUseCase,
    ResetPasswordUseCase,
)
from medcourier.application.use_cases.auth.resolve_session import ResolveSessionUseCase
from medcourier.application.use_cases.auth.signup import SignupUseCase
from medcourier.domain.enums import UserType
from medcourier.infrastructure.auth.session_cookie import (
    COOKIE_NAME,
    clear_session_cookie,
    set_session_cookie,
)
from medcourier.interfaces.http.dto.auth import (
    DriverSignupDTO,
    ForgotPasswordDTO,
    LoginDTO,
    ResetPasswordDTO,
    ShipperSignupDTO,
)
from medcourier.shared.config import load_config
from medcourier.shared.errors.validation import parse_body
from medcourier.shared.logging import logger
from medcourier.shared.middleware.rate_limit import client_key, rate_limit, rate_limit_exempt


def _session_response(result: LoginResult, status: HTTPStatus) -> tuple[Response, int]:
    response = jsonify({"success": True, "user": result.principal.to_dict()})
    set_session_cookie(response, result.token, load_config())
    return response, int(status)


class AuthController:
    def __init__(
        self,
        *,
        signup_use_case: SignupUseCase,
        login_use_case: LoginUseCase,
        resolve_session_use_case: ResolveSessionUseCase,
        forgot_password_use_case: ForgotPasswordUseCase,
        reset_password_use_case: ResetPasswordUseCase,
    ) -> None:
        self._signup_use_case = signup_use_case
        self._login_use_case = login_use_case
        self._resolve_session_use_case = resolve_session_use_case
        self._forgot_password_use_case = forgot_password_use_case
        self._reset_password_use_case = reset_password_use_case

    @rate_limit("auth")
    def signup(self, user_type: str) -> tuple[Response, int]:
        kind = UserType(user_type)
        if kind is UserType.DRIVER:
            dto = parse_body(DriverSignupDTO)
            company_name = None
        else:
            dto = parse_body(ShipperSignupDTO)
            company_name = dto.company_name

        result = self._signup_use_case.execute(
            kind,
            email=dto.email,
            password=dto.password,
            name=dto.name,
            phone=dto.phone,
            company_name=company_name,
        )
        return _session_response(result, HTTPStatus.CREATED)

    @rate_limit("auth")
    def login(self, user_type: str) -> tuple[Response, int]:
        dto = parse_body(LoginDTO)
        result = self._login_use_case.execute(
            dto.email, dto.password, UserType(user_type), ip_address=client_key(request)
        )
        return _session_response(result, HTTPStatus.OK)

    def logout(self) -> tuple[Response, int]:
        response = jsonify({"success": True})
        clear_session_cookie(response, load_config())
        logger.info("auth.logout: ok")
        return response, 200

    @rate_limit_exempt
    def check(self) -> tuple[Response, int]:
        state = self._resolve_session_use_case.execute(request.cookies.get(COOKIE_NAME))
        if state.principal is None:
            response = jsonify({"authenticated": False, "user": None})
            if state.stale:
                clear_session_cookie(response, load_config())
            return response, 200
        return jsonify({"authenticated": True, "user": state.principal.to_dict()}), 200

    @rate_limit("auth")
    def forgot_password(self, user_type: str) -> tuple[Response, int]:
        dto = parse_body(ForgotPasswordDTO)
        payload = self._forgot_password_use_case.execute(dto.email, UserType(user_type))
        return jsonify(payload), 200

    @rate_limit("auth")
    def reset_password(self, user_type: str) -> tuple[Response, int]:
        dto = parse_body(ResetPasswordDTO)
        self._reset_password_use_case.execute(dto.token, dto.password, UserType(user_type))
        return jsonify({"success": True, "message": "Password has been reset"}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        portal = "<any(driver, shipper):user_type>"
        bp.add_url_rule(f"/{portal}/signup", view_func=self.signup, methods=["POST"])
        bp.add_url_rule(
            "/<any(driver, shipper, admin):user_type>/login",
            view_func=self.login,
            methods=["POST"],
        )
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/check", view_func=self.check, methods=["GET"])
        bp.add_url_rule(
            f"/{portal}/forgot-password", view_func=self.forgot_password, methods=["POST"]
        )
        bp.add_url_rule(
            f"/{portal}/reset-password", view_func=self.reset_password, methods=["POST"]
        )
        return bp
