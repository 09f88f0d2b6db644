"""API components: REST endpoint, GraphQL endpoint, WebSocket."""

from __future__ import annotations

from imortal.application.components.definition import (
    BuiltinComponent,
    ComponentDefinition,
    data_in,
    data_out,
    field_def,
    option,
    trigger_in,
    trigger_out,
)
from imortal.domain.enums import ComponentCategory
from imortal.domain.types import ANY, JSON, STRING, TEXT, array

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


def rest() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.API_REST.value,
        name="REST Endpoint",
        category=ComponentCategory.API,
        description="An HTTP endpoint bound to a path and method",
        icon="globe",
        fields=(
            field_def("path", STRING, required=True, default_value="/"),
            field_def("method", STRING, required=True, default_value="GET"),
        ),
        inputs=(
            data_in("request", ANY, multiple=True),
            data_in("body", JSON),
            data_in("params", JSON),
            data_in("query", JSON),
            data_in("headers", JSON),
        ),
        outputs=(
            data_out("response", ANY),
            trigger_out("on_request"),
            data_out("error", STRING),
        ),
        config=(
            option("method", "GET", options=HTTP_METHODS),
            option("path", ""),
            option("auth_required", False),
            option("roles", ""),
            option("response_type", "json", options=("json", "text", "binary")),
            option("rate_limit", 0, min=0),
            option("timeout_ms", 30000, min=0),
            option("cors_enabled", True),
        ),
        tags=("api", "rest", "http", "endpoint"),
    )


def graphql() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.API_GRAPHQL.value,
        name="GraphQL Endpoint",
        category=ComponentCategory.API,
        description="A GraphQL operation served over HTTP",
        icon="share-2",
        fields=(
            field_def("name", STRING, required=True),
            field_def("schema", TEXT),
        ),
        inputs=(
            data_in("variables", JSON),
            data_in("context", ANY, multiple=True),
            trigger_in("execute"),
        ),
        outputs=(
            data_out("data", JSON),
            data_out("errors", array(JSON)),
            trigger_out("on_query"),
            trigger_out("on_mutation"),
            trigger_out("on_subscription"),
        ),
        config=(
            option(
                "operation_type",
                "query",
                options=("query", "mutation", "subscription"),
            ),
            option("path", "/graphql"),
            option("introspection", True),
            option("playground", True),
            option("max_depth", 10, min=1),
            option("max_complexity", 0, min=0),
        ),
        tags=("api", "graphql"),
    )


def websocket() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.API_WEBSOCKET.value,
        name="WebSocket",
        category=ComponentCategory.API,
        description="A bidirectional real-time channel",
        icon="radio",
        fields=(
            field_def("path", STRING, required=True, default_value="/ws"),
            field_def("channel", STRING),
        ),
        inputs=(
            data_in("message", ANY, multiple=True),
            data_in("broadcast", ANY),
            trigger_in("close"),
        ),
        outputs=(
            data_out("received", ANY),
            data_out("client_id", STRING),
            trigger_out("on_connect"),
            trigger_out("on_message"),
            trigger_out("on_disconnect"),
            trigger_out("on_error"),
            data_out("error", STRING),
        ),
        config=(
            option("auth_required", False),
            option("message_format", "json", options=("json", "text", "binary")),
            option("ping_interval", 30, min=0),
            option("max_connections", 0, min=0),
            option("max_message_size", 65536, min=0),
            option("compression", False),
        ),
        tags=("api", "websocket", "realtime"),
    )


def api_definitions() -> list[ComponentDefinition]:
    return [rest(), graphql(), websocket()]
