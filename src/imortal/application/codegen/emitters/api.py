"""Emitter for ``api.*`` nodes: REST, GraphQL and WebSocket handlers."""

from __future__ import annotations

import re

from imortal.application.codegen.base import GeneratedFile, NodeContext
from imortal.application.codegen.naming import to_pascal_case, to_snake_case, to_table_name
from imortal.application.components.definition import BuiltinComponent
from imortal.domain.entities import Node
from imortal.domain.enums import ConnectionKind, FileType
from imortal.domain.exceptions import UnsupportedComponentError

ENTITY = BuiltinComponent.DATA_ENTITY.value
PLACEHOLDER = "Payload"

_PATH_PARAM = re.compile(r"\{(\w+)\}")


def handler_path(node: Node) -> str:
    return f"app/handlers/{to_snake_case(node.name)}.py"


def _configured(node: Node, key: str, default: str) -> str:
    """Config value first, then the same-named field's default."""
    value = node.get_config_str(key)
    if value:
        return value
    field = node.get_field(key)
    if field is not None and isinstance(field.default_value, str) and field.default_value:
        return field.default_value
    return default


def _normalise_path(path: str) -> str:
    path = "/" + path.strip().strip("/")
    return path if path != "/" else "/"


def connected_entity(ctx: NodeContext) -> Node | None:
    """The entity reachable over a DataFlow edge; warn when ambiguous."""
    entities = ctx.connected(ENTITY, ConnectionKind.DATA_FLOW)
    if len(entities) > 1:
        names = ", ".join(e.name for e in entities)
        ctx.warn(f"several entities connected ({names}), using '{entities[0].name}'")
    return entities[0] if entities else None


def render_rest(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    entity = connected_entity(ctx)
    if entity is None:
        ctx.warn("no entity connected, handler uses a placeholder payload type")

    method = _configured(node, "method", "GET").upper()
    default_path = f"/{to_table_name(entity.name)}" if entity else f"/{to_snake_case(node.name)}"
    path = _configured(node, "path", "/")
    path = _normalise_path(default_path if path == "/" else path)

    match = _PATH_PARAM.search(path)
    id_param = match.group(1) if match else None
    if method in ("PUT", "PATCH", "DELETE") and id_param is None:
        id_param = "item_id"
        path = f"{path.rstrip('/')}/{{{id_param}}}"

    model = to_pascal_case(entity.name) if entity else PLACEHOLDER
    content = ctx.render(
        "rest.py.j2",
        name=node.name,
        func=to_snake_case(node.name),
        method=method,
        path=path,
        id_param=id_param,
        entity=to_pascal_case(entity.name) if entity else None,
        entity_module=to_snake_case(entity.name) if entity else None,
        entity_has_id=bool(entity and entity.get_field("id")),
        model=model,
        store=entity.name if entity else node.name,
        tag=to_snake_case(entity.name if entity else node.name),
        auth_required=node.get_config_bool("auth_required"),
        roles=[r.strip() for r in node.get_config_str("roles").split(",") if r.strip()],
    )
    return GeneratedFile(handler_path(node), content, FileType.HANDLER, node.id)


def render_graphql(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    entities = ctx.connected(ENTITY)
    content = ctx.render(
        "graphql.py.j2",
        name=node.name,
        func=to_snake_case(node.name),
        path=_normalise_path(node.get_config_str("path", "/graphql")),
        operation_type=node.get_config_str("operation_type", "query"),
        max_depth=ctx.config_int("max_depth", 10),
        entities=[
            {"name": e.name, "collection": to_pascal_case(to_table_name(e.name))}
            for e in entities
        ],
    )
    return GeneratedFile(handler_path(node), content, FileType.HANDLER, node.id)


def render_websocket(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    content = ctx.render(
        "websocket.py.j2",
        name=node.name,
        func=to_snake_case(node.name),
        path=_normalise_path(_configured(node, "path", "/ws")),
        message_format=node.get_config_str("message_format", "json"),
        max_connections=ctx.config_int("max_connections", 0),
    )
    return GeneratedFile(handler_path(node), content, FileType.HANDLER, node.id)


class ApiEmitter:
    prefix = "api."

    def emit(self, ctx: NodeContext) -> list[GeneratedFile]:
        kind = ctx.node.component_type
        if kind == BuiltinComponent.API_REST.value:
            return [render_rest(ctx)]
        if kind == BuiltinComponent.API_GRAPHQL.value:
            return [render_graphql(ctx)]
        if kind == BuiltinComponent.API_WEBSOCKET.value:
            return [render_websocket(ctx)]
        raise UnsupportedComponentError(ctx.node.id, kind)
