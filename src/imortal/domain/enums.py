"""Domain enumerations for the project graph.

- ComponentCategory: palette grouping of component definitions
- TypeKind: discriminator of :class:`~imortal.domain.types.DataType`
- ConnectionKind / RelationType: edge semantics
- PortDirection / PortKind: port shape
- Severity: diagnostic level
- FileType: tag on generated files
"""

from __future__ import annotations

from enum import Enum


class ComponentCategory(str, Enum):
    """Top-level grouping of component definitions.

    The first five carry built-in definitions; the others exist so that
    custom definitions can be filed somewhere sensible.
    """

    AUTH = "auth"
    DATA = "data"
    API = "api"
    STORAGE = "storage"
    UI = "ui"
    LOGIC = "logic"
    EMBEDDED = "embedded"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY[self]


_CATEGORY_DISPLAY: dict[ComponentCategory, str] = {
    ComponentCategory.AUTH: "Authentication",
    ComponentCategory.DATA: "Data",
    ComponentCategory.API: "API",
    ComponentCategory.STORAGE: "Storage",
    ComponentCategory.UI: "User Interface",
    ComponentCategory.LOGIC: "Logic",
    ComponentCategory.EMBEDDED: "Embedded",
    ComponentCategory.CUSTOM: "Custom",
}


class TypeKind(str, Enum):
    """Discriminator for DataType variants."""

    STRING = "String"
    TEXT = "Text"
    INT32 = "Int32"
    INT64 = "Int64"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"
    BOOL = "Bool"
    UUID = "Uuid"
    DATETIME = "DateTime"
    DATE = "Date"
    TIME = "Time"
    BYTES = "Bytes"
    JSON = "Json"
    ANY = "Any"
    TRIGGER = "Trigger"
    OPTIONAL = "Optional"
    ARRAY = "Array"
    MAP = "Map"
    ENTITY = "Entity"
    REFERENCE = "Reference"
    CUSTOM = "Custom"


class ConnectionKind(str, Enum):
    """What an edge means."""

    DATA_FLOW = "data_flow"
    NAVIGATION = "navigation"
    RELATIONSHIP = "relationship"
    TRIGGER = "trigger"
    DEPENDENCY = "dependency"


class RelationType(str, Enum):
    """Multiplicity of a Relationship edge. Metadata only, never checked."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"


class PortDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class PortKind(str, Enum):
    """Payload class of a port: values, control signals or page flow."""

    DATA = "data"
    TRIGGER = "trigger"
    FLOW = "flow"


class Severity(str, Enum):
    """Diagnostic severity, most severe first."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class FileType(str, Enum):
    """Tag attached to every generated file."""

    STRUCT = "struct"
    HANDLER = "handler"
    MIGRATION = "migration"
    CONFIG = "config"
    MODULE = "module"


class ForeignKeyAction(str, Enum):
    """Referential action of a foreign-key constraint."""

    NO_ACTION = "no_action"
    RESTRICT = "restrict"
    CASCADE = "cascade"
    SET_NULL = "set_null"
    SET_DEFAULT = "set_default"

    def to_sql(self) -> str:
        return self.value.replace("_", " ").upper()


class ConstraintKind(str, Enum):
    PRIMARY_KEY = "primary_key"
    UNIQUE = "unique"
    INDEXED = "indexed"
    FOREIGN_KEY = "foreign_key"
    AUTO_INCREMENT = "auto_increment"
    CHECK = "check"
    DEFAULT = "default"


class ValidationKind(str, Enum):
    """Value-level validation attached to a field (consumed by codegen)."""

    REQUIRED = "required"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    EMAIL = "email"
    URL = "url"
    UUID = "uuid"
    CUSTOM = "custom"


class DatabaseBackend(str, Enum):
    """SQL dialect targeted by generated migrations."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"

    def current_timestamp(self) -> str:
        if self is DatabaseBackend.POSTGRES:
            return "NOW()"
        return "CURRENT_TIMESTAMP"


class DiagnosticKind(str, Enum):
    """What a validation diagnostic is about."""

    PRIMARY_KEY_MISSING = "primary_key_missing"
    DANGLING_PORT = "dangling_port"
    UNCONNECTED = "unconnected"
    PORT_TYPE_MISMATCH = "port_type_mismatch"
    DUPLICATE_NAME = "duplicate_name"
    DISABLED_EDGE = "disabled_edge"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
