"""Component definitions: immutable templates that instantiate into nodes.

Also provides the small builder helpers the built-in definitions are written
with (``field_def``, ``data_in``, ``trigger_out``, ``option`` ...).
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from imortal.domain.entities import (
    Field,
    FieldConstraint,
    Node,
    Port,
    PortCollection,
    Size,
    Validation,
)
from imortal.domain.enums import ComponentCategory, PortDirection, PortKind
from imortal.domain.types import TRIGGER, ConfigValue, DataType

# Placeholder entity name in port types, bound to the node name on instantiate.
SELF_ENTITY = "Self"


class BuiltinComponent(str, Enum):
    """The closed set of built-in component ids, in registration order."""

    AUTH_LOGIN = "auth.login"
    AUTH_REGISTER = "auth.register"
    AUTH_LOGOUT = "auth.logout"
    AUTH_SESSION = "auth.session"
    DATA_ENTITY = "data.entity"
    DATA_COLLECTION = "data.collection"
    DATA_QUERY = "data.query"
    API_REST = "api.rest"
    API_GRAPHQL = "api.graphql"
    API_WEBSOCKET = "api.websocket"
    STORAGE_DATABASE = "storage.database"
    STORAGE_CACHE = "storage.cache"
    STORAGE_FILES = "storage.files"
    LOGIC_VALIDATOR = "logic.validator"
    LOGIC_TRANSFORMER = "logic.transformer"
    LOGIC_CONDITION = "logic.condition"


class ConfigType(str, Enum):
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    SELECT = "select"
    SECRET = "secret"


# ---------------------------------------------------------------------------
# Template parts
# ---------------------------------------------------------------------------


class FieldDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data_type: DataType
    label: str = ""
    required: bool = False
    default_value: ConfigValue = None
    constraints: tuple[FieldConstraint, ...] = ()
    validations: tuple[Validation, ...] = ()
    description: str = ""
    read_only: bool = False
    system: bool = False

    def to_field(self) -> Field:
        return Field(
            name=self.name,
            data_type=self.data_type,
            label=self.label or self.name.replace("_", " ").title(),
            required=self.required,
            default_value=copy.deepcopy(self.default_value),
            constraints=list(self.constraints),
            validations=list(self.validations),
            description=self.description,
            read_only=self.read_only,
            system=self.system,
        )


class PortDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    direction: PortDirection
    data_type: DataType
    kind: PortKind = PortKind.DATA
    multiple: bool = False
    required: bool = False
    description: str = ""

    def to_port(self, order: int) -> Port:
        return Port(
            name=self.name,
            direction=self.direction,
            kind=self.kind,
            data_type=self.data_type,
            multiple=self.multiple,
            required=self.required,
            description=self.description,
            order=order,
        )


class ConfigOption(BaseModel):
    """One entry of a component's config schema."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    config_type: ConfigType
    default: ConfigValue = None
    required: bool = False
    options: tuple[str, ...] = ()
    min: float | None = None
    max: float | None = None
    description: str = ""


class ComponentDefinition(BaseModel):
    """Immutable template for one component kind."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: ComponentCategory
    description: str = ""
    icon: str = ""
    fields: tuple[FieldDefinition, ...] = ()
    inputs: tuple[PortDefinition, ...] = ()
    outputs: tuple[PortDefinition, ...] = ()
    config: tuple[ConfigOption, ...] = ()
    tags: tuple[str, ...] = ()
    allow_custom_fields: bool = True
    default_width: float = 200.0
    default_height: float = 150.0
    version: str = "1.0.0"

    def get_option(self, key: str) -> ConfigOption | None:
        return next((o for o in self.config if o.key == key), None)

    def matches(self, query: str) -> bool:
        q = query.lower()
        haystack = [self.id, self.name, self.description, *self.tags]
        return any(q in item.lower() for item in haystack)

    def instantiate(self, name: str | None = None) -> Node:
        """Create a fresh node: new ids everywhere, config set to defaults."""
        node_name = name or self.name
        inputs = [p.to_port(i) for i, p in enumerate(self.inputs)]
        outputs = [p.to_port(i) for i, p in enumerate(self.outputs)]
        for port in [*inputs, *outputs]:
            port.data_type = port.data_type.bind_entity(SELF_ENTITY, node_name)

        return Node(
            component_type=self.id,
            name=node_name,
            category=self.category,
            size=Size(width=self.default_width, height=self.default_height),
            fields=[f.to_field() for f in self.fields],
            ports=PortCollection(inputs=inputs, outputs=outputs),
            config={o.key: copy.deepcopy(o.default) for o in self.config},
            description=self.description,
            icon=self.icon,
            tags=list(self.tags),
        )


# ---------------------------------------------------------------------------
# Builder helpers
# ---------------------------------------------------------------------------


def field_def(name: str, data_type: DataType, **kwargs: Any) -> FieldDefinition:
    return FieldDefinition(name=name, data_type=data_type, **kwargs)


def data_in(name: str, data_type: DataType, **kwargs: Any) -> PortDefinition:
    return PortDefinition(name=name, direction=PortDirection.INPUT, data_type=data_type, **kwargs)


def data_out(name: str, data_type: DataType, **kwargs: Any) -> PortDefinition:
    return PortDefinition(name=name, direction=PortDirection.OUTPUT, data_type=data_type, **kwargs)


def trigger_in(name: str, description: str = "") -> PortDefinition:
    return PortDefinition(
        name=name,
        direction=PortDirection.INPUT,
        data_type=TRIGGER,
        kind=PortKind.TRIGGER,
        description=description,
    )


def trigger_out(name: str, description: str = "") -> PortDefinition:
    return PortDefinition(
        name=name,
        direction=PortDirection.OUTPUT,
        data_type=TRIGGER,
        kind=PortKind.TRIGGER,
        description=description,
    )


def option(
    key: str,
    default: ConfigValue,
    *,
    label: str = "",
    config_type: ConfigType | None = None,
    **kwargs: Any,
) -> ConfigOption:
    """Config option; the type is inferred from *default* unless given."""
    if config_type is None:
        config_type = _infer_config_type(default, kwargs.get("options"))
    return ConfigOption(
        key=key,
        label=label or key.replace("_", " ").capitalize(),
        config_type=config_type,
        default=default,
        **kwargs,
    )


def _infer_config_type(default: ConfigValue, options: Any) -> ConfigType:
    if options:
        return ConfigType.SELECT
    if isinstance(default, bool):
        return ConfigType.BOOLEAN
    if isinstance(default, int):
        return ConfigType.INTEGER
    if isinstance(default, float):
        return ConfigType.FLOAT
    return ConfigType.STRING
