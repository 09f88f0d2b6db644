"""Emitter for ``data.*`` nodes: models, migrations, collections, queries."""

from __future__ import annotations

from dataclasses import dataclass

from imortal.application.codegen.base import GeneratedFile, NodeContext
from imortal.application.codegen.naming import to_pascal_case, to_snake_case, to_table_name
from imortal.application.codegen.typemap import python_type, sql_type
from imortal.application.components.definition import BuiltinComponent
from imortal.domain.entities import Field, Node
from imortal.domain.enums import (
    ConnectionKind,
    ConstraintKind,
    DatabaseBackend,
    FileType,
    RelationType,
    TypeKind,
    ValidationKind,
)
from imortal.domain.exceptions import UnsupportedComponentError

ENTITY = BuiltinComponent.DATA_ENTITY.value
DATABASE = BuiltinComponent.STORAGE_DATABASE.value
TIMESTAMP_FIELDS = ("created_at", "updated_at")

_FIELD_KWARGS: dict[ValidationKind, str] = {
    ValidationKind.MIN_LENGTH: "min_length",
    ValidationKind.MAX_LENGTH: "max_length",
    ValidationKind.MIN: "ge",
    ValidationKind.MAX: "le",
    ValidationKind.PATTERN: "pattern",
}


@dataclass
class ModelAttribute:
    name: str
    annotation: str
    default: str | None = None
    comment: str = ""


@dataclass
class Column:
    name: str
    definition: str


def table_name(node: Node) -> str:
    return node.get_config_str("table_name") or to_table_name(node.name)


_HOLDS_KEY = (RelationType.MANY_TO_ONE, RelationType.ONE_TO_ONE)


def referenced_entities(ctx: NodeContext) -> list[Node]:
    """Entities this entity holds a foreign key to, derived from relationships.

    The "one" side of a relationship is referenced by the "many" side; for
    one-to-one the source of the edge holds the key.  Many-to-many needs a
    join table and adds no column.
    """
    found: dict = {}
    for edge, peer in ctx.outgoing:
        rel = edge.connection_type.relation
        if peer.component_type == ENTITY and rel in _HOLDS_KEY:
            found.setdefault(peer.id, peer)
    for edge, peer in ctx.incoming:
        rel = edge.connection_type.relation
        if peer.component_type == ENTITY and rel is RelationType.ONE_TO_MANY:
            found.setdefault(peer.id, peer)
    return [n for n in found.values() if n.id != ctx.node.id]


# ---------------------------------------------------------------------------
# Pydantic model
# ---------------------------------------------------------------------------


def attribute_name(field: Field) -> str:
    return to_snake_case(field.name)


def _model_attribute(field: Field, imports: set[str], optional_all: bool = False) -> ModelAttribute:
    """One model attribute; names that are not identifiers keep theirs as an alias."""
    annotation = python_type(field.data_type, imports, entities_as_ids=True)
    kwargs = [
        f"{_FIELD_KWARGS[v.kind]}={v.value!r}"
        for v in field.validations
        if v.kind in _FIELD_KWARGS and v.value is not None
    ]
    comment = ""
    if field.data_type.kind is TypeKind.ENTITY:
        comment = f"id of {to_pascal_case(field.data_type.name)}"

    default: str | None
    factory: str | None = None
    if optional_all:
        default = "None"
    elif field.system and field.data_type.kind is TypeKind.UUID and field.is_primary_key:
        imports.add("from uuid import uuid4")
        default, factory = None, "uuid4"
        kwargs = []
    elif field.system and field.data_type.kind is TypeKind.DATETIME:
        default, factory = None, "utc_now"
        kwargs = []
    elif field.default_value is not None:
        default = repr(field.default_value)
    elif not field.required:
        default = "None"
    else:
        default = None

    if default == "None" and not annotation.endswith("| None"):
        annotation = f"{annotation} | None"

    name = attribute_name(field)
    if name != field.name:
        kwargs.append(f"alias={field.name!r}")
    if factory is not None:
        head = [f"default_factory={factory}"]
    else:
        head = [] if default is None else [f"default={default}"]
    if factory is not None or kwargs:
        default = f"Field({', '.join(head + kwargs)})"
    return ModelAttribute(name, annotation, default, comment)


def render_model(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    imports: set[str] = set()
    attributes = [_model_attribute(f, imports) for f in node.fields]
    writable = [f for f in node.fields if not f.read_only and not f.system]
    create = [_model_attribute(f, imports) for f in writable]
    update = [_model_attribute(f, imports, optional_all=True) for f in writable]

    names = {attribute_name(f) for f in node.fields}
    for target in referenced_entities(ctx):
        column = f"{to_snake_case(target.name)}_id"
        if column not in names:
            imports.add("from uuid import UUID")
            ref = ModelAttribute(column, "UUID | None", "None", f"id of {to_pascal_case(target.name)}")
            attributes.append(ref)
            create.append(ref)
            update.append(ref)
    if node.get_config_bool("soft_delete"):
        imports.add("from datetime import datetime")
        attributes.append(ModelAttribute("deleted_at", "datetime | None", "None"))

    uses_now = any("default_factory=utc_now" in (a.default or "") for a in attributes)
    if uses_now:
        imports.update({"from datetime import datetime", "from datetime import timezone"})

    content = ctx.render(
        "model.py.j2",
        entity=node.name,
        class_name=to_pascal_case(node.name),
        description=node.description,
        table=table_name(node),
        imports=sorted(imports),
        attributes=attributes,
        create_attributes=create,
        update_attributes=update,
        uses_now=uses_now,
        aliased=any(attribute_name(f) != f.name for f in node.fields),
    )
    return GeneratedFile(
        path=f"app/models/{to_snake_case(node.name)}.py",
        content=content,
        file_type=FileType.STRUCT,
        node_id=node.id,
    )


# ---------------------------------------------------------------------------
# SQL migration
# ---------------------------------------------------------------------------


def _sql_literal(value: object, backend: DatabaseBackend) -> str | None:
    if isinstance(value, bool):
        if backend is DatabaseBackend.SQLITE:
            return "1" if value else "0"
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return None


def _column(field: Field, ctx: NodeContext, backend: DatabaseBackend) -> Column:
    name = to_snake_case(field.name)
    col_type = sql_type(field.data_type, backend)
    parts: list[str] = []

    auto = field.has_constraint(ConstraintKind.AUTO_INCREMENT)
    if auto and backend is DatabaseBackend.POSTGRES:
        col_type = "BIGSERIAL" if field.data_type.kind is TypeKind.INT64 else "SERIAL"
    if auto and backend is DatabaseBackend.SQLITE and field.is_primary_key:
        col_type = "INTEGER"

    nullable = field.data_type.is_optional or not (field.required or field.is_primary_key)
    if field.name in TIMESTAMP_FIELDS and field.data_type.kind is TypeKind.DATETIME:
        nullable = False
    if not nullable:
        parts.append("NOT NULL")

    for constraint in field.constraints:
        if constraint.kind is ConstraintKind.PRIMARY_KEY:
            parts.append("PRIMARY KEY")
            if auto and backend is DatabaseBackend.SQLITE:
                parts.append("AUTOINCREMENT")
        elif constraint.kind is ConstraintKind.UNIQUE:
            parts.append("UNIQUE")
        elif constraint.kind is ConstraintKind.CHECK and constraint.expression:
            parts.append(f"CHECK ({constraint.expression})")
        elif constraint.kind is ConstraintKind.DEFAULT and constraint.expression:
            parts.append(f"DEFAULT {constraint.expression}")
        elif constraint.kind is ConstraintKind.FOREIGN_KEY and constraint.entity:
            parts.append(
                f"REFERENCES {to_table_name(constraint.entity)}({constraint.field or 'id'})"
                f" ON DELETE {constraint.on_delete.to_sql()}"
                f" ON UPDATE {constraint.on_update.to_sql()}"
            )
    if auto and backend is DatabaseBackend.MYSQL:
        parts.append("AUTO_INCREMENT")

    has_default = field.has_constraint(ConstraintKind.DEFAULT)
    if not has_default and field.name in TIMESTAMP_FIELDS and field.data_type.kind is TypeKind.DATETIME:
        parts.append(f"DEFAULT {backend.current_timestamp()}")
    elif not has_default and field.default_value is not None:
        literal = _sql_literal(field.default_value, backend)
        if literal is not None:
            parts.append(f"DEFAULT {literal}")

    if field.data_type.kind is TypeKind.ENTITY and not field.has_constraint(ConstraintKind.FOREIGN_KEY):
        target = ctx.graph.find_node_by_name(field.data_type.name)
        if target is not None and target.component_type == ENTITY:
            parts.append(f"REFERENCES {table_name(target)}(id)")

    return Column(name, " ".join([col_type, *parts]))


def migration_backend(ctx: NodeContext, database: Node) -> DatabaseBackend:
    value = database.get_config_str("backend")
    try:
        return DatabaseBackend(value)
    except ValueError:
        if value:
            ctx.warn(
                f"database backend '{value}' has no migration dialect, "
                f"using {ctx.config.database_backend.value}"
            )
        return ctx.config.database_backend


def render_migration(ctx: NodeContext, database: Node) -> GeneratedFile:
    node = ctx.node
    backend = migration_backend(ctx, database)
    table = table_name(node)
    columns = [_column(f, ctx, backend) for f in node.fields]
    present = {c.name for c in columns}

    if node.get_config_bool("timestamps", True):
        for name in TIMESTAMP_FIELDS:
            if name not in present:
                ts = _SQL_TIMESTAMP[backend]
                columns.append(Column(name, f"{ts} NOT NULL DEFAULT {backend.current_timestamp()}"))
    if node.get_config_bool("soft_delete") and "deleted_at" not in present:
        columns.append(Column("deleted_at", _SQL_TIMESTAMP[backend]))

    for target in referenced_entities(ctx):
        column = f"{to_snake_case(target.name)}_id"
        if column not in present:
            uuid_type = _SQL_UUID[backend]
            columns.append(
                Column(column, f"{uuid_type} REFERENCES {table_name(target)}(id) ON DELETE SET NULL")
            )

    indexes = [
        (f"idx_{table}_{to_snake_case(f.name)}", to_snake_case(f.name))
        for f in node.fields
        if f.has_constraint(ConstraintKind.INDEXED)
    ]
    name = f"create_{table}"
    content = ctx.render(
        "migration.sql.j2",
        name=name,
        entity=node.name,
        backend=backend.value,
        version=ctx.config.migration_version,
        table=table,
        columns=columns,
        indexes=indexes,
    )
    return GeneratedFile(
        path=f"migrations/{ctx.config.migration_version}_{name}.sql",
        content=content,
        file_type=FileType.MIGRATION,
        node_id=node.id,
    )


_SQL_TIMESTAMP = {
    DatabaseBackend.POSTGRES: "TIMESTAMPTZ",
    DatabaseBackend.MYSQL: "DATETIME",
    DatabaseBackend.SQLITE: "TEXT",
}
_SQL_UUID = {
    DatabaseBackend.POSTGRES: "UUID",
    DatabaseBackend.MYSQL: "CHAR(36)",
    DatabaseBackend.SQLITE: "TEXT",
}


# ---------------------------------------------------------------------------
# Collections and queries
# ---------------------------------------------------------------------------


def _source_entity(ctx: NodeContext) -> Node | None:
    entities = ctx.connected(ENTITY, ConnectionKind.DATA_FLOW)
    return entities[0] if entities else None


def render_collection(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    source = _source_entity(ctx)
    if source is None:
        ctx.warn("no entity connected, listing an untyped store")
    content = ctx.render(
        "collection.py.j2",
        name=node.name,
        func=to_snake_case(node.name),
        store=source.name if source else node.name,
        entity=to_pascal_case(source.name) if source else None,
        page_size=ctx.config_int("page_size", 25),
        default_sort=node.get_config_str("default_sort", "-created_at"),
    )
    return GeneratedFile(
        path=f"app/queries/{to_snake_case(node.name)}.py",
        content=content,
        file_type=FileType.HANDLER,
        node_id=node.id,
    )


def _field_default(node: Node, name: str, fallback: object) -> object:
    field = node.get_field(name)
    if field is None or field.default_value is None:
        return fallback
    return field.default_value


def render_query(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    source = _source_entity(ctx)
    if source is None:
        ctx.warn("no entity connected, querying an untyped store")
    select_fields = node.get_config_str("select_fields", "*")
    content = ctx.render(
        "query.py.j2",
        name=node.name,
        func=to_snake_case(node.name),
        store=source.name if source else node.name,
        entity=to_pascal_case(source.name) if source else None,
        query_type=node.get_config_str("query_type", "select"),
        select_fields=[] if select_fields.strip() in ("", "*") else [
            s.strip() for s in select_fields.split(",") if s.strip()
        ],
        distinct=node.get_config_bool("distinct"),
        order_by=str(_field_default(node, "order_by", "")),
        limit=_field_default(node, "limit", 100),
        offset=_field_default(node, "offset", 0),
    )
    return GeneratedFile(
        path=f"app/queries/{to_snake_case(node.name)}.py",
        content=content,
        file_type=FileType.HANDLER,
        node_id=node.id,
    )


class DataEmitter:
    prefix = "data."

    def emit(self, ctx: NodeContext) -> list[GeneratedFile]:
        kind = ctx.node.component_type
        if kind == BuiltinComponent.DATA_ENTITY.value:
            files = [render_model(ctx)]
            databases = ctx.connected(DATABASE)
            if databases and ctx.config.generate_migrations:
                files.append(render_migration(ctx, databases[0]))
            return files
        if kind == BuiltinComponent.DATA_COLLECTION.value:
            return [render_collection(ctx)]
        if kind == BuiltinComponent.DATA_QUERY.value:
            return [render_query(ctx)]
        raise UnsupportedComponentError(ctx.node.id, kind)
