"""Domain events for the project graph.

All events are frozen dataclasses.  The graph publishes them on its optional
event bus after a mutation has been committed, so subscribers (an editor's
undo stack, a dirty-flag tracker) never observe a half-applied change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


# ---------------------------------------------------------------------------
# Node lifecycle events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NodeAdded:
    node_id: UUID
    component_type: str
    name: str


@dataclass(frozen=True)
class NodeRemoved:
    """A node was removed together with everything that referenced it."""

    node_id: UUID
    removed_edges: tuple[UUID, ...] = ()
    affected_groups: tuple[UUID, ...] = ()


@dataclass(frozen=True)
class NodeChanged:
    """A node's fields, config, name or position were edited."""

    node_id: UUID
    change: str
    details: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Edge and group events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EdgeAdded:
    edge_id: UUID
    from_node: UUID
    to_node: UUID


@dataclass(frozen=True)
class EdgeRemoved:
    edge_id: UUID


@dataclass(frozen=True)
class GroupCreated:
    group_id: UUID
    members: frozenset[UUID]


@dataclass(frozen=True)
class GroupRemoved:
    group_id: UUID
