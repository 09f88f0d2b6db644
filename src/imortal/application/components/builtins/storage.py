"""Storage components: database, cache, file storage."""

from __future__ import annotations

from imortal.application.components.definition import (
    BuiltinComponent,
    ComponentDefinition,
    ConfigType,
    data_in,
    data_out,
    option,
    trigger_in,
    trigger_out,
)
from imortal.domain.enums import ComponentCategory
from imortal.domain.types import ANY, BOOL, BYTES, INT64, JSON, STRING, array


def database() -> ComponentDefinition:
    """SQL/NoSQL connection; entities connected here get migrations."""
    return ComponentDefinition(
        id=BuiltinComponent.STORAGE_DATABASE.value,
        name="Database",
        category=ComponentCategory.STORAGE,
        description="A database connection with pooling and migrations",
        icon="database",
        inputs=(
            data_in("entities", ANY, multiple=True, description="Entities stored here"),
            data_in("query", STRING),
            data_in("params", array(ANY)),
            trigger_in("connect"),
            trigger_in("disconnect"),
            trigger_in("execute"),
        ),
        outputs=(
            data_out("connection", ANY),
            data_out("result", array(ANY)),
            data_out("affected_rows", INT64),
            trigger_out("on_connect"),
            trigger_out("on_disconnect"),
            trigger_out("on_error"),
            data_out("error", STRING),
        ),
        config=(
            option(
                "backend",
                "postgres",
                options=("postgres", "mysql", "sqlite", "mssql", "mongodb"),
                required=True,
            ),
            option("connection_string", "${DATABASE_URL}", config_type=ConfigType.SECRET),
            option("host", "localhost"),
            option("port", 5432, min=1, max=65535),
            option("database", ""),
            option("username", ""),
            option("password", "${DATABASE_PASSWORD}", config_type=ConfigType.SECRET),
            option("pool_size", 10, min=1),
            option("pool_min", 1, min=0),
            option("connection_timeout", 5000, min=0),
            option("query_timeout", 30000, min=0),
            option("ssl", True),
            option("auto_migrate", False),
            option("log_queries", False),
        ),
        tags=("storage", "database", "sql"),
    )


def cache() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.STORAGE_CACHE.value,
        name="Cache",
        category=ComponentCategory.STORAGE,
        description="Key/value cache with expiry",
        icon="zap",
        inputs=(
            data_in("key", STRING),
            data_in("value", ANY),
            data_in("ttl", INT64),
            trigger_in("get"),
            trigger_in("set"),
            trigger_in("delete"),
            trigger_in("clear"),
        ),
        outputs=(
            data_out("result", ANY),
            data_out("exists", BOOL),
            trigger_out("on_hit"),
            trigger_out("on_miss"),
            trigger_out("on_set"),
            trigger_out("on_error"),
            data_out("error", STRING),
        ),
        config=(
            option("backend", "memory", options=("memory", "redis", "memcached")),
            option("redis_url", "redis://localhost:6379"),
            option("redis_db", 0, min=0),
            option("default_ttl", 3600, min=0),
            option("max_memory_mb", 128, min=1),
            option("eviction_policy", "lru", options=("lru", "lfu", "fifo")),
            option("key_prefix", ""),
            option("compression", False),
            option("stats", True),
        ),
        tags=("storage", "cache", "redis"),
    )


def files() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.STORAGE_FILES.value,
        name="File Storage",
        category=ComponentCategory.STORAGE,
        description="Local or object storage for uploaded files",
        icon="folder",
        inputs=(
            data_in("file", BYTES),
            data_in("path", STRING),
            data_in("metadata", JSON),
            trigger_in("upload"),
            trigger_in("download"),
            trigger_in("delete"),
            trigger_in("list"),
        ),
        outputs=(
            data_out("data", BYTES),
            data_out("url", STRING),
            data_out("signed_url", STRING),
            data_out("file_info", JSON),
            data_out("files", array(JSON)),
            trigger_out("on_upload"),
            trigger_out("on_download"),
            trigger_out("on_delete"),
            trigger_out("on_error"),
            data_out("error", STRING),
        ),
        config=(
            option("backend", "local", options=("local", "s3", "gcs", "azure", "minio")),
            option("base_path", "./storage"),
            option("bucket", ""),
            option("region", "us-east-1"),
            option("access_key", "${STORAGE_ACCESS_KEY}", config_type=ConfigType.SECRET),
            option("secret_key", "${STORAGE_SECRET_KEY}", config_type=ConfigType.SECRET),
            option("endpoint", ""),
            option("max_file_size_mb", 100, min=1),
            option("allowed_types", ""),
            option("signed_url_expiry", 3600, min=0),
            option("public_read", False),
            option("versioning", False),
        ),
        tags=("storage", "files", "upload", "s3"),
    )


def storage_definitions() -> list[ComponentDefinition]:
    return [database(), cache(), files()]
