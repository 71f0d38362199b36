# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Operator commands, run with ``flask --app medcourier.app:create_app <command>``."""

from __future__ import annotations

import json

import click
from flask import Flask

from medcourier.domain.enums import UserType
from medcourier.shared.errors import AppError


def register_cli(app: Flask) -> None:
    from medcourier.infrastructure.container import container

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("name")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(email: str, name: str, password: str) -> None:
        """Create an admin account."""
        if len(password) < 8:
            raise click.BadParameter("must be at least 8 characters", param_hint="password")
        try:
            account = container.create_admin_use_case.execute(email, name, password)
        except AppError as exc:
            raise click.ClickException(exc.message) from exc
        click.echo(f"Created admin {account.email} ({account.id})")

    @app.cli.command("clear-lockout")
    @click.argument("email")
    @click.argument("user_type", type=click.Choice([kind.value for kind in UserType]))
    def clear_lockout(email: str, user_type: str) -> None:
        """Forget recorded login attempts for one account."""
        removed = container.clear_lockout_use_case.execute(email, UserType(user_type))
        click.echo(f"Removed {removed} login attempt(s) for {email}")

    @app.cli.command("cleanup-auth")
    def cleanup_auth() -> None:
        """Purge old login attempts and spent reset tokens."""
        result = container.cleanup_auth_use_case.execute()
        click.echo(json.dumps(result))

    @app.cli.command("vehicle-expiry-check")
    def vehicle_expiry_check() -> None:
        """Run the vehicle registration expiry scan once."""
        result = container.vehicle_expiry_check_use_case.execute()
        click.echo(json.dumps(result))


__all__ = ["register_cli"]
