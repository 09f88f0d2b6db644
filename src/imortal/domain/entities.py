"""Domain entities of the project graph.

Nodes, edges, fields and ports are Pydantic BaseModels.  They are owned by a
:class:`~imortal.domain.graph.ProjectGraph`; node-local invariants (unique
field names, protected system fields) are enforced here, cross-node
invariants by the graph.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import Field as ModelField

from imortal.domain.enums import (
    ComponentCategory,
    ConstraintKind,
    ForeignKeyAction,
    PortDirection,
    PortKind,
    RelationType,
    ValidationKind,
)
from imortal.domain.exceptions import DuplicateIdError, NotFoundError, SystemFieldError
from imortal.domain.types import ConfigValue, ConnectionType, DataType

MIN_ZOOM = 0.1
MAX_ZOOM = 5.0


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class Size(BaseModel):
    width: float = 200.0
    height: float = 150.0


class Viewport(BaseModel):
    """Canvas pan/zoom. Opaque to the core, persisted with the project."""

    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0

    @field_validator("zoom")
    @classmethod
    def clamp_zoom(cls, value: float) -> float:
        return min(max(value, MIN_ZOOM), MAX_ZOOM)


class ProjectMeta(BaseModel):
    name: str
    version: str = "0.1.0"
    description: str = ""


class Validation(BaseModel):
    """A value rule on a field, e.g. ``min_length=3``."""

    model_config = ConfigDict(frozen=True)

    kind: ValidationKind
    value: int | float | str | None = None
    message: str | None = None


class FieldConstraint(BaseModel):
    """A storage-level constraint on a field (primary key, FK, ...)."""

    model_config = ConfigDict(frozen=True)

    kind: ConstraintKind
    entity: str | None = None  # foreign key target entity
    field: str | None = None  # foreign key target field
    on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    expression: str | None = None  # CHECK / DEFAULT expression

    @classmethod
    def primary_key(cls) -> FieldConstraint:
        return cls(kind=ConstraintKind.PRIMARY_KEY)

    @classmethod
    def unique(cls) -> FieldConstraint:
        return cls(kind=ConstraintKind.UNIQUE)

    @classmethod
    def indexed(cls) -> FieldConstraint:
        return cls(kind=ConstraintKind.INDEXED)

    @classmethod
    def foreign_key(
        cls,
        entity: str,
        field: str = "id",
        on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION,
        on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION,
    ) -> FieldConstraint:
        return cls(
            kind=ConstraintKind.FOREIGN_KEY,
            entity=entity,
            field=field,
            on_delete=on_delete,
            on_update=on_update,
        )


# ---------------------------------------------------------------------------
# Fields and ports
# ---------------------------------------------------------------------------


class Field(BaseModel):
    """A named, typed attribute of a node.

    ``system`` marks fields injected by a component definition (``id``,
    ``created_at`` ...); they cannot be removed through field mutation.
    """

    id: UUID = ModelField(default_factory=uuid4)
    name: str
    data_type: DataType
    label: str = ""
    required: bool = False
    default_value: ConfigValue = None
    constraints: list[FieldConstraint] = ModelField(default_factory=list)
    validations: list[Validation] = ModelField(default_factory=list)
    description: str = ""
    read_only: bool = False
    system: bool = False

    @property
    def is_primary_key(self) -> bool:
        return self.has_constraint(ConstraintKind.PRIMARY_KEY)

    @property
    def is_unique(self) -> bool:
        return self.has_constraint(ConstraintKind.UNIQUE)

    def has_constraint(self, kind: ConstraintKind) -> bool:
        return any(c.kind is kind for c in self.constraints)

    def as_primary_key(self) -> Field:
        """Return a copy marked primary key (and therefore required)."""
        constraints = list(self.constraints)
        if not self.is_primary_key:
            constraints.insert(0, FieldConstraint.primary_key())
        return self.model_copy(update={"constraints": constraints, "required": True})


class Port(BaseModel):
    """A named attachment point on a node."""

    id: UUID = ModelField(default_factory=uuid4)
    name: str
    direction: PortDirection
    kind: PortKind = PortKind.DATA
    data_type: DataType
    multiple: bool = False
    required: bool = False
    description: str = ""
    order: int = 0


class PortCollection(BaseModel):
    inputs: list[Port] = ModelField(default_factory=list)
    outputs: list[Port] = ModelField(default_factory=list)

    def get_input(self, name: str) -> Port | None:
        return next((p for p in self.inputs if p.name == name), None)

    def get_output(self, name: str) -> Port | None:
        return next((p for p in self.outputs if p.name == name), None)

    def get(self, name: str) -> Port | None:
        """Look up a port by name in either direction, outputs first."""
        return self.get_output(name) or self.get_input(name)

    def all(self) -> list[Port]:
        return [*self.inputs, *self.outputs]

    def __len__(self) -> int:
        return len(self.inputs) + len(self.outputs)


# ---------------------------------------------------------------------------
# Node and Edge
# ---------------------------------------------------------------------------


class Node(BaseModel):
    """A component instance placed in the graph."""

    id: UUID = ModelField(default_factory=uuid4)
    component_type: str
    name: str
    category: ComponentCategory = ComponentCategory.CUSTOM
    position: Position = ModelField(default_factory=Position)
    size: Size = ModelField(default_factory=Size)
    fields: list[Field] = ModelField(default_factory=list)
    ports: PortCollection = ModelField(default_factory=PortCollection)
    config: dict[str, ConfigValue] = ModelField(default_factory=dict)
    description: str = ""
    icon: str = ""
    tags: list[str] = ModelField(default_factory=list)
    metadata: dict[str, Any] = ModelField(default_factory=dict)
    locked: bool = False

    # -- fields ----------------------------------------------------------

    def get_field(self, name: str) -> Field | None:
        return next((f for f in self.fields if f.name == name), None)

    def primary_key_fields(self) -> list[Field]:
        return [f for f in self.fields if f.is_primary_key]

    def add_field(self, field: Field) -> None:
        if self.get_field(field.name) is not None:
            raise DuplicateIdError(
                f"Node '{self.name}' already has a field named '{field.name}'",
                {"node_id": self.id, "field": field.name},
            )
        self.fields.append(field)

    def remove_field(self, name: str) -> Field:
        field = self.get_field(name)
        if field is None:
            raise NotFoundError(
                f"Node '{self.name}' has no field named '{name}'",
                {"node_id": self.id, "field": name},
            )
        if field.system:
            raise SystemFieldError(
                f"Field '{name}' is a system field and cannot be removed",
                {"node_id": self.id, "field": name},
            )
        self.fields.remove(field)
        return field

    # -- ports / config --------------------------------------------------

    def get_port(self, name: str) -> Port | None:
        return self.ports.get(name)

    def get_config(self, key: str, default: ConfigValue = None) -> ConfigValue:
        return self.config.get(key, default)

    def get_config_str(self, key: str, default: str = "") -> str:
        value = self.config.get(key)
        return value if isinstance(value, str) else default

    def get_config_bool(self, key: str, default: bool = False) -> bool:
        value = self.config.get(key)
        return value if isinstance(value, bool) else default

    def duplicate(self, offset: float = 20.0) -> Node:
        """Deep copy with fresh ids for the node, its fields and its ports."""
        copy = self.model_copy(deep=True)
        copy.id = uuid4()
        copy.name = f"{self.name} (copy)"
        copy.position = Position(x=self.position.x + offset, y=self.position.y + offset)
        copy.locked = False
        for f in copy.fields:
            f.id = uuid4()
        for p in copy.ports.all():
            p.id = uuid4()
        return copy


class Edge(BaseModel):
    """A typed, directed connection between two node ports."""

    id: UUID = ModelField(default_factory=uuid4)
    from_node: UUID
    from_port: str
    to_node: UUID
    to_port: str
    connection_type: ConnectionType = ModelField(default_factory=ConnectionType.data_flow)
    label: str = ""
    enabled: bool = True
    metadata: dict[str, Any] = ModelField(default_factory=dict)

    @classmethod
    def data_flow(cls, from_node: UUID, from_port: str, to_node: UUID, to_port: str) -> Edge:
        return cls(from_node=from_node, from_port=from_port, to_node=to_node, to_port=to_port)

    @classmethod
    def trigger(cls, from_node: UUID, from_port: str, to_node: UUID, to_port: str) -> Edge:
        return cls(
            from_node=from_node,
            from_port=from_port,
            to_node=to_node,
            to_port=to_port,
            connection_type=ConnectionType.trigger(),
        )

    @classmethod
    def navigation(cls, from_node: UUID, from_port: str, to_node: UUID, to_port: str) -> Edge:
        return cls(
            from_node=from_node,
            from_port=from_port,
            to_node=to_node,
            to_port=to_port,
            connection_type=ConnectionType.navigation(),
        )

    @classmethod
    def dependency(cls, from_node: UUID, from_port: str, to_node: UUID, to_port: str) -> Edge:
        return cls(
            from_node=from_node,
            from_port=from_port,
            to_node=to_node,
            to_port=to_port,
            connection_type=ConnectionType.dependency(),
        )

    @classmethod
    def relationship(cls, from_node: UUID, to_node: UUID, relation: RelationType) -> Edge:
        """Entity-to-entity relationship over the ``entity`` ports."""
        return cls(
            from_node=from_node,
            from_port="entity",
            to_node=to_node,
            to_port="entity",
            connection_type=ConnectionType.relationship(relation),
        )

    def touches(self, node_id: UUID) -> bool:
        return self.from_node == node_id or self.to_node == node_id

    def peer(self, node_id: UUID) -> UUID:
        """Return the endpoint opposite *node_id*."""
        return self.to_node if self.from_node == node_id else self.from_node
