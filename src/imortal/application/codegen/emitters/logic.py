"""Emitter for ``logic.*`` nodes: validators, transformers and conditions."""

from __future__ import annotations

import json
from typing import Any

from imortal.application.codegen.base import GeneratedFile, NodeContext
from imortal.application.codegen.naming import to_snake_case
from imortal.domain.entities import Node
from imortal.domain.enums import FileType
from imortal.domain.exceptions import UnsupportedComponentError

LOGIC_KINDS = ("validator", "transformer", "condition")


def _json_field(ctx: NodeContext, name: str) -> dict[str, Any]:
    """Parse a JSON object held in a text field's default; warn and use {} otherwise."""
    field = ctx.node.get_field(name)
    raw = field.default_value if field is not None else None
    if not raw:
        return {}
    try:
        parsed = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        ctx.warn(f"field '{name}' is not valid JSON ({exc.msg}), ignoring it")
        return {}
    if not isinstance(parsed, dict):
        ctx.warn(f"field '{name}' must hold a JSON object, ignoring it")
        return {}
    return parsed


def _text_field(node: Node, name: str, default: str = "") -> str:
    field = node.get_field(name)
    if field is None or not isinstance(field.default_value, str):
        return default
    return field.default_value


def render_logic(ctx: NodeContext, kind: str) -> GeneratedFile:
    node = ctx.node
    values: dict[str, Any] = {"kind": kind, "name": node.name, "func": to_snake_case(node.name)}
    if kind == "validator":
        values.update(
            rules=_json_field(ctx, "rules_json"),
            fail_fast=node.get_config_bool("fail_fast"),
            trim_strings=node.get_config_bool("trim_strings", True),
            allow_unknown=node.get_config_bool("allow_unknown_fields", True),
        )
    elif kind == "transformer":
        values.update(
            mapping=_json_field(ctx, "mapping"),
            preserve_unmapped=node.get_config_bool("preserve_unmapped"),
            null_on_missing=node.get_config_bool("null_on_missing", True),
        )
    else:
        values.update(
            operator=node.get_config_str("operator", "custom"),
            compare_value=node.get_config("compare_value", ""),
            case_sensitive=node.get_config_bool("case_sensitive", True),
            key=_text_field(node, "expression", "value"),
        )
    content = ctx.render("logic.py.j2", **values)
    return GeneratedFile(
        path=f"app/logic/{to_snake_case(node.name)}.py",
        content=content,
        file_type=FileType.MODULE,
        node_id=node.id,
    )


class LogicEmitter:
    prefix = "logic."

    def emit(self, ctx: NodeContext) -> list[GeneratedFile]:
        kind = ctx.node.component_type.removeprefix(self.prefix)
        if kind not in LOGIC_KINDS:
            raise UnsupportedComponentError(ctx.node.id, ctx.node.component_type)
        return [render_logic(ctx, kind)]
