"""Emitter for ``auth.*`` nodes: login, register, logout and session routers."""

from __future__ import annotations

import re

from imortal.application.codegen.base import GeneratedFile, NodeContext
from imortal.application.codegen.emitters.data import ENTITY
from imortal.application.codegen.naming import to_snake_case
from imortal.domain.enums import FileType
from imortal.domain.exceptions import UnsupportedComponentError

AUTH_KINDS = ("login", "register", "logout", "session")
DEFAULT_USER_STORE = "User"

_DURATION = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def duration_seconds(value: object, default: int) -> int:
    """``"15m"`` → 900; plain integers are seconds; unparsable values fall back."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    match = _DURATION.match(str(value or ""))
    if match is None:
        return default
    return int(match.group(1)) * _UNIT_SECONDS[match.group(2)]


def render_auth(ctx: NodeContext, kind: str) -> GeneratedFile:
    node = ctx.node
    users = ctx.connected(ENTITY)
    user_store = users[0].name if users else DEFAULT_USER_STORE
    content = ctx.render(
        "auth.py.j2",
        kind=kind,
        name=node.name,
        func=to_snake_case(node.name),
        route=f"/auth/{kind}",
        user_store=user_store,
        max_attempts=ctx.config_int("max_attempts", 5),
        lockout_seconds=duration_seconds(node.get_config("lockout_duration"), 900),
        session_seconds=duration_seconds(node.get_config("session_duration"), 86400),
        refresh_seconds=duration_seconds(node.get_config("refresh_threshold"), 300),
        auto_refresh=node.get_config_bool("auto_refresh", True),
        auto_login=node.get_config_bool("auto_login", True),
        min_password_length=ctx.config_int("min_password_length", 8),
        require_uppercase=node.get_config_bool("require_password_uppercase"),
        require_number=node.get_config_bool("require_password_number"),
        require_special=node.get_config_bool("require_password_special"),
        redirect_url=node.get_config_str("redirect_url", "/"),
    )
    return GeneratedFile(
        path=f"app/auth/{to_snake_case(node.name)}.py",
        content=content,
        file_type=FileType.HANDLER,
        node_id=node.id,
    )


class AuthEmitter:
    prefix = "auth."

    def emit(self, ctx: NodeContext) -> list[GeneratedFile]:
        kind = ctx.node.component_type.removeprefix(self.prefix)
        if kind not in AUTH_KINDS:
            raise UnsupportedComponentError(ctx.node.id, ctx.node.component_type)
        return [render_auth(ctx, kind)]
