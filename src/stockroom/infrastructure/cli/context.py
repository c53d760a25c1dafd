"""Shared plumbing for CLI commands: wired services and the acting user."""

from __future__ import annotations

import functools
from collections.abc import Callable

import click

from stockroom.domain.model.principal import Principal, Role
from stockroom.infrastructure.bootstrap import Services, build_services

ALERT_FLUSH_SECONDS = 10.0


def services() -> Services:
    """Services for the running command, built once per invocation."""
    ctx = click.get_current_context()
    root = ctx.find_root()
    if root.obj is None:
        root.obj = build_services()
        root.call_on_close(lambda: root.obj.dispatcher.shutdown(ALERT_FLUSH_SECONDS))
    return root.obj


def acting_user(func: Callable) -> Callable:
    """Add ``--user``/``--admin`` options and pass a Principal as ``principal``."""

    @click.option("--user", "user_id", required=True, help="ID of the acting user.")
    @click.option("--admin", is_flag=True, default=False, help="Act with the admin role.")
    @functools.wraps(func)
    def wrapper(*args, user_id: str, admin: bool, **kwargs):
        principal = Principal(user_id, Role.ADMIN if admin else Role.CUSTOMER)
        return func(*args, principal=principal, **kwargs)

    return wrapper
