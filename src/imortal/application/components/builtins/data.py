"""Data components: entity, collection, query."""

from __future__ import annotations

from imortal.application.components.definition import (
    SELF_ENTITY,
    BuiltinComponent,
    ComponentDefinition,
    ConfigType,
    data_in,
    data_out,
    field_def,
    option,
    trigger_in,
    trigger_out,
)
from imortal.domain.entities import FieldConstraint
from imortal.domain.enums import ComponentCategory
from imortal.domain.types import (
    ANY,
    DATETIME,
    INT32,
    INT64,
    JSON,
    STRING,
    TEXT,
    UUID_TYPE,
    array,
    entity as entity_type,
)


def entity() -> ComponentDefinition:
    """Persistent data model; ``id`` is the system primary key."""
    return ComponentDefinition(
        id=BuiltinComponent.DATA_ENTITY.value,
        name="Entity",
        category=ComponentCategory.DATA,
        description="A data model with typed fields",
        icon="table",
        fields=(
            field_def(
                "id",
                UUID_TYPE,
                label="ID",
                required=True,
                read_only=True,
                system=True,
                constraints=(FieldConstraint.primary_key(),),
            ),
            field_def("created_at", DATETIME, read_only=True, system=True),
            field_def("updated_at", DATETIME, read_only=True, system=True),
        ),
        inputs=(
            trigger_in("create"),
            trigger_in("update"),
            trigger_in("delete"),
        ),
        outputs=(
            data_out("entity", entity_type(SELF_ENTITY), multiple=True),
            data_out("list", array(entity_type(SELF_ENTITY)), multiple=True),
        ),
        config=(
            option("table_name", ""),
            option("timestamps", True),
            option("soft_delete", False),
            option("id_type", "uuid", options=("uuid", "auto_increment", "custom")),
        ),
        tags=("data", "model", "entity", "table"),
        default_height=200.0,
    )


def collection() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.DATA_COLLECTION.value,
        name="Collection",
        category=ComponentCategory.DATA,
        description="A paginated list of entities",
        icon="list",
        inputs=(
            data_in("entity_type", ANY, required=True),
            data_in("filter", JSON),
            trigger_in("refresh"),
        ),
        outputs=(
            data_out("items", array(ANY)),
            data_out("count", INT64),
            data_out("page_info", JSON),
            trigger_out("on_load"),
            trigger_out("on_error"),
        ),
        config=(
            option("page_size", 25, min=1, max=1000),
            option("default_sort", "-created_at"),
            option("auto_load", True),
            option("cache", False),
            option("cache_ttl", 300, min=0),
        ),
        tags=("data", "list", "pagination"),
    )


def query() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.DATA_QUERY.value,
        name="Query",
        category=ComponentCategory.DATA,
        description="A filtered query over an entity",
        icon="search",
        fields=(
            field_def("where_clause", TEXT),
            field_def("order_by", STRING),
            field_def("limit", INT32, default_value=100),
            field_def("offset", INT32, default_value=0),
        ),
        inputs=(
            data_in("source", ANY, required=True),
            data_in("params", JSON),
            trigger_in("execute"),
        ),
        outputs=(
            data_out("results", array(ANY)),
            data_out("first", ANY),
            data_out("count", INT64),
            trigger_out("on_success"),
            trigger_out("on_error"),
            data_out("error", STRING),
        ),
        config=(
            option("query_type", "select", options=("select", "insert", "update", "delete")),
            option("select_fields", "*"),
            option("distinct", False),
            option("joins", "", config_type=ConfigType.TEXT),
            option("group_by", ""),
            option("having", ""),
        ),
        tags=("data", "query", "filter", "sql"),
    )


def data_definitions() -> list[ComponentDefinition]:
    return [entity(), collection(), query()]
