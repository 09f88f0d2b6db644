"""Core value types: DataType, ConnectionType and ConfigValue.

All types are frozen Pydantic models so they compare and hash by value and
serialise to the ``{"kind": ..., ...}`` shape used in project files.
"""

from __future__ import annotations

from typing import Any, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator

from imortal.domain.enums import ConnectionKind, RelationType, TypeKind

NodeId = UUID
EdgeId = UUID
FieldId = UUID
PortId = UUID
GroupId = UUID

# Typed scalar (or nested list/dict of scalars) stored in node config.
ConfigValue = Union[None, bool, int, float, str, list[Any], dict[str, Any]]


# ---------------------------------------------------------------------------
# DataType
# ---------------------------------------------------------------------------

_WRAPPERS = {TypeKind.OPTIONAL, TypeKind.ARRAY}
_NAMED = {TypeKind.ENTITY, TypeKind.REFERENCE}
_NUMERIC = {TypeKind.INT32, TypeKind.INT64, TypeKind.FLOAT32, TypeKind.FLOAT64}


class DataType(BaseModel):
    """Payload type of a field or port.

    ``inner`` holds the wrapped type of Optional/Array and the value type of
    Map; ``key`` holds the Map key type; ``name`` holds the entity name of
    Entity/Reference and the type name of Custom; ``domain`` qualifies Custom.
    """

    model_config = ConfigDict(frozen=True)

    kind: TypeKind
    inner: DataType | None = None
    key: DataType | None = None
    name: str | None = None
    domain: str | None = None

    @model_validator(mode="after")
    def check_shape(self) -> DataType:
        if self.kind in _WRAPPERS and self.inner is None:
            raise ValueError(f"{self.kind.value} requires an inner type")
        if self.kind is TypeKind.MAP and (self.inner is None or self.key is None):
            raise ValueError("Map requires key and value types")
        if self.kind in _NAMED and not self.name:
            raise ValueError(f"{self.kind.value} requires an entity name")
        if self.kind is TypeKind.CUSTOM and not (self.name and self.domain):
            raise ValueError("Custom requires domain and type name")
        return self

    @property
    def is_scalar(self) -> bool:
        return self.kind not in _WRAPPERS | _NAMED | {TypeKind.MAP, TypeKind.CUSTOM}

    @property
    def is_numeric(self) -> bool:
        return self.kind in _NUMERIC

    @property
    def is_optional(self) -> bool:
        return self.kind is TypeKind.OPTIONAL

    def entity_name(self) -> str | None:
        """Return the entity this type points at, looking through wrappers."""
        if self.kind in _NAMED:
            return self.name
        if self.kind in _WRAPPERS and self.inner is not None:
            return self.inner.entity_name()
        return None

    def bind_entity(self, placeholder: str, name: str) -> DataType:
        """Return a copy with every ``Entity(placeholder)`` renamed to *name*."""
        if self.kind is TypeKind.ENTITY and self.name == placeholder:
            return self.model_copy(update={"name": name})
        if self.inner is not None:
            return self.model_copy(
                update={"inner": self.inner.bind_entity(placeholder, name)}
            )
        return self

    def display(self) -> str:
        if self.kind in _WRAPPERS:
            return f"{self.kind.value}<{self.inner.display()}>"
        if self.kind is TypeKind.MAP:
            return f"Map<{self.key.display()}, {self.inner.display()}>"
        if self.kind in _NAMED:
            return f"{self.kind.value}<{self.name}>"
        if self.kind is TypeKind.CUSTOM:
            return f"{self.domain}::{self.name}"
        return self.kind.value

    def __str__(self) -> str:
        return self.display()


# Shorthands for the scalar variants
STRING = DataType(kind=TypeKind.STRING)
TEXT = DataType(kind=TypeKind.TEXT)
INT32 = DataType(kind=TypeKind.INT32)
INT64 = DataType(kind=TypeKind.INT64)
FLOAT32 = DataType(kind=TypeKind.FLOAT32)
FLOAT64 = DataType(kind=TypeKind.FLOAT64)
BOOL = DataType(kind=TypeKind.BOOL)
UUID_TYPE = DataType(kind=TypeKind.UUID)
DATETIME = DataType(kind=TypeKind.DATETIME)
DATE = DataType(kind=TypeKind.DATE)
TIME = DataType(kind=TypeKind.TIME)
BYTES = DataType(kind=TypeKind.BYTES)
JSON = DataType(kind=TypeKind.JSON)
ANY = DataType(kind=TypeKind.ANY)
TRIGGER = DataType(kind=TypeKind.TRIGGER)


def optional(inner: DataType) -> DataType:
    return DataType(kind=TypeKind.OPTIONAL, inner=inner)


def array(inner: DataType) -> DataType:
    return DataType(kind=TypeKind.ARRAY, inner=inner)


def map_of(key: DataType, value: DataType) -> DataType:
    return DataType(kind=TypeKind.MAP, key=key, inner=value)


def entity(name: str) -> DataType:
    return DataType(kind=TypeKind.ENTITY, name=name)


def reference(name: str) -> DataType:
    return DataType(kind=TypeKind.REFERENCE, name=name)


def custom(domain: str, type_name: str) -> DataType:
    return DataType(kind=TypeKind.CUSTOM, domain=domain, name=type_name)


# ---------------------------------------------------------------------------
# ConnectionType
# ---------------------------------------------------------------------------


class ConnectionType(BaseModel):
    """Semantic type of an edge; ``relation`` is set only for relationships."""

    model_config = ConfigDict(frozen=True)

    kind: ConnectionKind
    relation: RelationType | None = None

    @model_validator(mode="after")
    def check_relation(self) -> ConnectionType:
        if self.kind is ConnectionKind.RELATIONSHIP and self.relation is None:
            raise ValueError("relationship connections require a relation type")
        if self.kind is not ConnectionKind.RELATIONSHIP and self.relation is not None:
            raise ValueError(f"{self.kind.value} connections carry no relation type")
        return self

    @classmethod
    def data_flow(cls) -> ConnectionType:
        return cls(kind=ConnectionKind.DATA_FLOW)

    @classmethod
    def navigation(cls) -> ConnectionType:
        return cls(kind=ConnectionKind.NAVIGATION)

    @classmethod
    def trigger(cls) -> ConnectionType:
        return cls(kind=ConnectionKind.TRIGGER)

    @classmethod
    def dependency(cls) -> ConnectionType:
        return cls(kind=ConnectionKind.DEPENDENCY)

    @classmethod
    def relationship(cls, relation: RelationType) -> ConnectionType:
        return cls(kind=ConnectionKind.RELATIONSHIP, relation=relation)

    @property
    def is_relationship(self) -> bool:
        return self.kind is ConnectionKind.RELATIONSHIP

    def display(self) -> str:
        if self.relation is not None:
            return f"{self.kind.value}({self.relation.value})"
        return self.kind.value
