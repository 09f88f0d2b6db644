"""Emitter for ``storage.*`` nodes: database, cache and file storage modules."""

from __future__ import annotations

from imortal.application.codegen.base import GeneratedFile, NodeContext, setting_expr
from imortal.application.codegen.emitters.data import ENTITY, table_name
from imortal.application.components.definition import BuiltinComponent
from imortal.domain.entities import Node
from imortal.domain.enums import FileType
from imortal.domain.exceptions import UnsupportedComponentError

CACHE_BACKENDS = ("memory", "redis")
FILE_BACKENDS = ("local",)


def _settings(node: Node, *keys: str) -> dict[str, str]:
    return {key: setting_expr(node.get_config(key)) for key in keys}


def render_database(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    values = _settings(
        node,
        "connection_string",
        "pool_size",
        "pool_min",
        "connection_timeout",
        "query_timeout",
        "ssl",
        "auto_migrate",
        "log_queries",
    )
    content = ctx.render(
        "db.py.j2",
        name=node.name,
        backend=node.get_config_str("backend", "postgres"),
        tables=[table_name(e) for e in ctx.connected(ENTITY)],
        values=values,
        uses_settings=any(v.startswith("get_settings()") for v in values.values()),
    )
    return GeneratedFile("app/db.py", content, FileType.CONFIG, node.id)


def render_cache(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    backend = node.get_config_str("backend", "memory")
    if backend not in CACHE_BACKENDS:
        ctx.warn(f"cache backend '{backend}' is not generated, using memory")
        backend = "memory"
    values = _settings(node, "redis_url", "redis_db", "default_ttl", "key_prefix")
    content = ctx.render(
        "cache.py.j2",
        name=node.name,
        backend=backend,
        values=values,
        max_entries=ctx.config_int("max_memory_mb", 128) * 1024,
        uses_settings=any(v.startswith("get_settings()") for v in values.values()),
    )
    return GeneratedFile("app/cache.py", content, FileType.MODULE, node.id)


def render_files(ctx: NodeContext) -> GeneratedFile:
    node = ctx.node
    backend = node.get_config_str("backend", "local")
    if backend not in FILE_BACKENDS:
        ctx.warn(f"file storage backend '{backend}' is not generated, using local")
    allowed = node.get_config_str("allowed_types")
    content = ctx.render(
        "file_storage.py.j2",
        name=node.name,
        base_path=node.get_config_str("base_path", "./storage"),
        max_file_size_mb=ctx.config_int("max_file_size_mb", 100),
        allowed_types=[t.strip() for t in allowed.split(",") if t.strip()],
        versioning=node.get_config_bool("versioning"),
    )
    return GeneratedFile("app/storage.py", content, FileType.MODULE, node.id)


class StorageEmitter:
    prefix = "storage."

    def emit(self, ctx: NodeContext) -> list[GeneratedFile]:
        kind = ctx.node.component_type
        if kind == BuiltinComponent.STORAGE_DATABASE.value:
            return [render_database(ctx)]
        if kind == BuiltinComponent.STORAGE_CACHE.value:
            return [render_cache(ctx)]
        if kind == BuiltinComponent.STORAGE_FILES.value:
            return [render_files(ctx)]
        raise UnsupportedComponentError(ctx.node.id, kind)
