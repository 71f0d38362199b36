# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Route guards built on the session cookie.

Each guard resolves the cookie once per request, stores the principal on
``flask.g.principal`` and raises the matching ``AppError``. Driver and shipper
guards can bind a URL parameter that must equal the caller's own id.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g, request

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import UserType
from medcourier.infrastructure.auth.session_cookie import COOKIE_NAME
from medcourier.shared.errors import AuthenticationError, AuthorizationError
from medcourier.shared.logging import bind_principal, logger

View = Callable[..., Any]


def authenticate() -> Principal:
    principal: Principal | None = g.get("principal")
    if principal is not None:
        return principal

    from medcourier.infrastructure.container import container

    state = container.resolve_session_use_case.execute(request.cookies.get(COOKIE_NAME))
    if state.principal is None:
        raise AuthenticationError(clear_session=state.stale)
    g.principal = state.principal
    bind_principal(state.principal.user_type.value, state.principal.user_id)
    return state.principal


def current_principal() -> Principal:
    principal: Principal | None = g.get("principal")
    if principal is None:
        raise AuthenticationError()
    return principal


def require_session(func: View) -> View:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        authenticate()
        return func(*args, **kwargs)

    return wrapper


def require_admin(func: View) -> View:
    """Admin accounts and drivers flagged ``is_admin``."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        principal = authenticate()
        if not principal.is_admin:
            logger.warning(
                f"authz: admin route {request.path} refused for "
                f"{principal.user_type.value}:{principal.user_id}"
            )
            raise AuthorizationError("Admin access required")
        return func(*args, **kwargs)

    return wrapper


def _require_user_type(
    user_type: UserType, match: str | None, allow_admin: bool
) -> Callable[[View], View]:
    def decorator(func: View) -> View:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            principal = authenticate()
            if allow_admin and principal.is_admin:
                return func(*args, **kwargs)
            if principal.user_type is not user_type:
                raise AuthorizationError(f"{user_type.value.capitalize()} access required")
            if match is not None and kwargs.get(match) != principal.user_id:
                logger.warning(
                    f"authz: {principal.user_type.value}:{principal.user_id} "
                    f"tried {request.path}"
                )
                raise AuthorizationError("You can only access your own account")
            return func(*args, **kwargs)

        return wrapper

    return decorator


def require_driver(
    func: View | None = None, *, match: str | None = None, allow_admin: bool = False
) -> Any:
    decorator = _require_user_type(UserType.DRIVER, match, allow_admin)
    return decorator(func) if func is not None else decorator


def require_shipper(
    func: View | None = None, *, match: str | None = None, allow_admin: bool = False
) -> Any:
    decorator = _require_user_type(UserType.SHIPPER, match, allow_admin)
    return decorator(func) if func is not None else decorator


__all__ = [
    "authenticate",
    "current_principal",
    "require_admin",
    "require_driver",
    "require_session",
    "require_shipper",
]
