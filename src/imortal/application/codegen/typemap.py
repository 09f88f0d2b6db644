"""DataType lowering to Python annotations and SQL column types."""

from __future__ import annotations

from imortal.application.codegen.naming import to_pascal_case
from imortal.domain.enums import DatabaseBackend, TypeKind
from imortal.domain.types import DataType

_PYTHON_SCALARS: dict[TypeKind, str] = {
    TypeKind.STRING: "str",
    TypeKind.TEXT: "str",
    TypeKind.INT32: "int",
    TypeKind.INT64: "int",
    TypeKind.FLOAT32: "float",
    TypeKind.FLOAT64: "float",
    TypeKind.BOOL: "bool",
    TypeKind.UUID: "UUID",
    TypeKind.DATETIME: "datetime",
    TypeKind.DATE: "date",
    TypeKind.TIME: "time",
    TypeKind.BYTES: "bytes",
    TypeKind.JSON: "dict[str, Any]",
    TypeKind.ANY: "Any",
    TypeKind.TRIGGER: "None",
}

# annotation token → import line it needs
_PYTHON_IMPORTS: dict[str, str] = {
    "UUID": "from uuid import UUID",
    "datetime": "from datetime import datetime",
    "date": "from datetime import date",
    "time": "from datetime import time",
    "Any": "from typing import Any",
}


def python_type(
    data_type: DataType,
    imports: set[str] | None = None,
    *,
    entities_as_ids: bool = False,
) -> str:
    """Return the annotation for *data_type*, collecting needed imports.

    Entity types render as the entity class name, or as the referenced row
    id (``UUID``) when *entities_as_ids* is set; references are always ids.
    """
    imports = imports if imports is not None else set()
    kind = data_type.kind
    nested = {"entities_as_ids": entities_as_ids}

    if kind in _PYTHON_SCALARS:
        annotation = _PYTHON_SCALARS[kind]
    elif kind is TypeKind.OPTIONAL:
        annotation = f"{python_type(data_type.inner, imports, **nested)} | None"
    elif kind is TypeKind.ARRAY:
        annotation = f"list[{python_type(data_type.inner, imports, **nested)}]"
    elif kind is TypeKind.MAP:
        key = python_type(data_type.key, imports, **nested)
        annotation = f"dict[{key}, {python_type(data_type.inner, imports, **nested)}]"
    elif kind is TypeKind.ENTITY and not entities_as_ids:
        annotation = to_pascal_case(data_type.name)
    elif kind in (TypeKind.ENTITY, TypeKind.REFERENCE):
        annotation = "UUID"
    else:  # Custom: opaque to the generator
        annotation = "Any"

    for token, line in _PYTHON_IMPORTS.items():
        if token in annotation.replace("[", " ").replace("]", " ").replace(",", " ").split():
            imports.add(line)
    return annotation


# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SQL_TYPES: dict[DatabaseBackend, dict[TypeKind, str]] = {
    DatabaseBackend.POSTGRES: {
        TypeKind.STRING: "VARCHAR(255)",
        TypeKind.TEXT: "TEXT",
        TypeKind.INT32: "INTEGER",
        TypeKind.INT64: "BIGINT",
        TypeKind.FLOAT32: "REAL",
        TypeKind.FLOAT64: "DOUBLE PRECISION",
        TypeKind.BOOL: "BOOLEAN",
        TypeKind.UUID: "UUID",
        TypeKind.DATETIME: "TIMESTAMPTZ",
        TypeKind.DATE: "DATE",
        TypeKind.TIME: "TIME",
        TypeKind.BYTES: "BYTEA",
        TypeKind.JSON: "JSONB",
    },
    DatabaseBackend.MYSQL: {
        TypeKind.STRING: "VARCHAR(255)",
        TypeKind.TEXT: "TEXT",
        TypeKind.INT32: "INT",
        TypeKind.INT64: "BIGINT",
        TypeKind.FLOAT32: "FLOAT",
        TypeKind.FLOAT64: "DOUBLE",
        TypeKind.BOOL: "BOOLEAN",
        TypeKind.UUID: "CHAR(36)",
        TypeKind.DATETIME: "DATETIME",
        TypeKind.DATE: "DATE",
        TypeKind.TIME: "TIME",
        TypeKind.BYTES: "BLOB",
        TypeKind.JSON: "JSON",
    },
    DatabaseBackend.SQLITE: {
        TypeKind.STRING: "TEXT",
        TypeKind.TEXT: "TEXT",
        TypeKind.INT32: "INTEGER",
        TypeKind.INT64: "INTEGER",
        TypeKind.FLOAT32: "REAL",
        TypeKind.FLOAT64: "REAL",
        TypeKind.BOOL: "INTEGER",
        TypeKind.UUID: "TEXT",
        TypeKind.DATETIME: "TEXT",
        TypeKind.DATE: "TEXT",
        TypeKind.TIME: "TEXT",
        TypeKind.BYTES: "BLOB",
        TypeKind.JSON: "TEXT",
    },
}


def sql_type(data_type: DataType, backend: DatabaseBackend) -> str:
    """Column type for *data_type*; nullability is handled by the caller."""
    table = _SQL_TYPES[backend]
    kind = data_type.kind
    if kind is TypeKind.OPTIONAL:
        return sql_type(data_type.inner, backend)
    if kind in (TypeKind.REFERENCE, TypeKind.ENTITY):
        return table[TypeKind.UUID]
    if kind in (TypeKind.ARRAY, TypeKind.MAP, TypeKind.ANY):
        return table[TypeKind.JSON]
    return table.get(kind, table[TypeKind.TEXT])
