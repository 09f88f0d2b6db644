"""ProjectGraph: the owning container of nodes, edges and groups.

Nodes and edges live in id-keyed dicts (arena storage).  A NetworkX
MultiDiGraph mirrors the edge set, keyed by edge id, and serves adjacency
queries and cascade deletes.  Every mutation runs all of its checks before
touching either structure, so a failed call leaves the graph unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID, uuid4

import networkx as nx

from imortal.config.logging import get_logger
from imortal.domain.entities import Edge, Field, Node, Position, ProjectMeta, Viewport
from imortal.domain.enums import ComponentCategory
from imortal.domain.events import (
    EdgeAdded,
    EdgeRemoved,
    GroupCreated,
    GroupRemoved,
    NodeAdded,
    NodeChanged,
    NodeRemoved,
)
from imortal.domain.exceptions import (
    DuplicateIdError,
    NotFoundError,
    PortMismatchError,
    SelfConnectionError,
)
from imortal.domain.ports import EventBus
from imortal.domain.rules import check_edge_ports
from imortal.domain.types import ConfigValue

logger = get_logger(__name__)


class ProjectGraph:
    """A project's component graph plus opaque view state."""

    def __init__(
        self,
        meta: ProjectMeta | None = None,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self.meta = meta or ProjectMeta(name="Untitled Project")
        self.viewport = Viewport()
        self._nodes: dict[UUID, Node] = {}
        self._edges: dict[UUID, Edge] = {}
        self._groups: dict[UUID, set[UUID]] = {}
        self._index: nx.MultiDiGraph = nx.MultiDiGraph()
        self._selected_nodes: set[UUID] = set()
        self._selected_edges: set[UUID] = set()
        self._event_bus = event_bus

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> UUID:
        if node.id in self._nodes:
            raise DuplicateIdError(
                f"Node id {node.id} already exists", {"node_id": node.id}
            )
        self._nodes[node.id] = node
        self._index.add_node(node.id)
        logger.debug("node_added", node_id=str(node.id), component_type=node.component_type)
        self._publish(NodeAdded(node.id, node.component_type, node.name))
        return node.id

    def remove_node(self, node_id: UUID) -> Node:
        """Remove a node and cascade: incident edges, group and selection membership."""
        node = self._require_node(node_id)

        incident = [key for _, _, key in self._index.in_edges(node_id, keys=True)]
        incident += [key for _, _, key in self._index.out_edges(node_id, keys=True)]
        incident = list(dict.fromkeys(incident))
        for edge_id in incident:
            del self._edges[edge_id]
            self._selected_edges.discard(edge_id)
        self._index.remove_node(node_id)

        affected = []
        for group_id, members in self._groups.items():
            if node_id in members:
                members.discard(node_id)
                affected.append(group_id)
        self._selected_nodes.discard(node_id)
        del self._nodes[node_id]

        logger.debug(
            "node_removed",
            node_id=str(node_id),
            edges_removed=len(incident),
            groups_affected=len(affected),
        )
        self._publish(NodeRemoved(node_id, tuple(incident), tuple(affected)))
        return node

    def get_node(self, node_id: UUID) -> Node | None:
        return self._nodes.get(node_id)

    def contains_node(self, node_id: UUID) -> bool:
        return node_id in self._nodes

    def nodes(self) -> list[Node]:
        """All nodes in insertion order."""
        return list(self._nodes.values())

    def node_ids(self) -> list[UUID]:
        return list(self._nodes.keys())

    def nodes_by_category(self, category: ComponentCategory) -> list[Node]:
        return [n for n in self._nodes.values() if n.category is category]

    def nodes_by_type(self, component_type: str) -> list[Node]:
        return [n for n in self._nodes.values() if n.component_type == component_type]

    def find_node_by_name(self, name: str) -> Node | None:
        return next((n for n in self._nodes.values() if n.name == name), None)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    # -- node edits ------------------------------------------------------

    def add_field(self, node_id: UUID, field: Field) -> None:
        node = self._require_node(node_id)
        node.add_field(field)
        self._publish(NodeChanged(node_id, "field_added", {"field": field.name}))

    def remove_field(self, node_id: UUID, name: str) -> Field:
        """Remove a non-system field. Edges are untouched: ports are not fields."""
        node = self._require_node(node_id)
        field = node.remove_field(name)
        self._publish(NodeChanged(node_id, "field_removed", {"field": name}))
        return field

    def set_config(self, node_id: UUID, key: str, value: ConfigValue) -> None:
        node = self._require_node(node_id)
        node.config[key] = value
        self._publish(NodeChanged(node_id, "config", {"key": key}))

    def rename_node(self, node_id: UUID, name: str) -> None:
        """Rename a node; entity ports typed after the old name follow it."""
        node = self._require_node(node_id)
        old = node.name
        node.name = name
        if node.component_type == "data.entity":
            for port in node.ports.all():
                if port.data_type.entity_name() == old:
                    port.data_type = port.data_type.bind_entity(old, name)
        self._publish(NodeChanged(node_id, "renamed", {"from": old, "to": name}))

    def move_node(self, node_id: UUID, x: float, y: float) -> None:
        node = self._require_node(node_id)
        node.position = Position(x=x, y=y)
        self._publish(NodeChanged(node_id, "moved"))

    def duplicate_node(self, node_id: UUID, offset: float = 20.0) -> UUID:
        """Insert a copy of a node with fresh ids. Edges are not copied."""
        copy = self._require_node(node_id).duplicate(offset)
        return self.add_node(copy)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(self, edge: Edge) -> UUID:
        """Insert an edge after checking endpoints, self-loops and ports.

        Duplicate edges between the same ports are accepted (fan-in/fan-out).
        """
        if edge.id in self._edges:
            raise DuplicateIdError(f"Edge id {edge.id} already exists", {"edge_id": edge.id})
        from_node = self._require_node(edge.from_node)
        to_node = self._require_node(edge.to_node)
        if edge.from_node == edge.to_node:
            raise SelfConnectionError(
                f"Cannot connect '{from_node.name}' to itself",
                {"node_id": edge.from_node},
            )
        check = check_edge_ports(edge, from_node, to_node)
        if not check.ok:
            raise PortMismatchError(
                check.problem,
                {"edge_id": edge.id, "from_port": edge.from_port, "to_port": edge.to_port},
            )

        self._edges[edge.id] = edge
        self._index.add_edge(edge.from_node, edge.to_node, key=edge.id)
        logger.debug(
            "edge_added",
            edge_id=str(edge.id),
            connection=edge.connection_type.display(),
        )
        self._publish(EdgeAdded(edge.id, edge.from_node, edge.to_node))
        return edge.id

    def remove_edge(self, edge_id: UUID) -> Edge:
        edge = self._edges.get(edge_id)
        if edge is None:
            raise NotFoundError(f"Edge {edge_id} not found", {"edge_id": edge_id})
        del self._edges[edge_id]
        self._index.remove_edge(edge.from_node, edge.to_node, key=edge_id)
        self._selected_edges.discard(edge_id)
        logger.debug("edge_removed", edge_id=str(edge_id))
        self._publish(EdgeRemoved(edge_id))
        return edge

    def get_edge(self, edge_id: UUID) -> Edge | None:
        return self._edges.get(edge_id)

    def edges(self) -> list[Edge]:
        """All edges in insertion order."""
        return list(self._edges.values())

    def edges_from(self, node_id: UUID) -> list[Edge]:
        return [e for e in self._edges.values() if e.from_node == node_id]

    def edges_to(self, node_id: UUID) -> list[Edge]:
        return [e for e in self._edges.values() if e.to_node == node_id]

    def edges_of(self, node_id: UUID) -> list[Edge]:
        return [e for e in self._edges.values() if e.touches(node_id)]

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    # ------------------------------------------------------------------
    # Adjacency queries
    # ------------------------------------------------------------------

    def neighbors_out(self, node_id: UUID, port: str | None = None) -> list[UUID]:
        """Targets of edges leaving *node_id* (optionally from one port)."""
        if node_id not in self._index:
            return []
        found = (
            target
            for _, target, key in self._index.out_edges(node_id, keys=True)
            if port is None or self._edges[key].from_port == port
        )
        return list(dict.fromkeys(found))

    def neighbors_in(self, node_id: UUID, port: str | None = None) -> list[UUID]:
        """Sources of edges entering *node_id* (optionally into one port)."""
        if node_id not in self._index:
            return []
        found = (
            source
            for source, _, key in self._index.in_edges(node_id, keys=True)
            if port is None or self._edges[key].to_port == port
        )
        return list(dict.fromkeys(found))

    def entity_names(self) -> set[str]:
        return {n.name for n in self.nodes_by_type("data.entity")}

    def has_cycle(self) -> bool:
        """Whether the connection structure contains a directed cycle."""
        return not nx.is_directed_acyclic_graph(self._index)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def group(self, node_ids: Iterable[UUID]) -> UUID:
        members = set(node_ids)
        missing = [nid for nid in members if nid not in self._nodes]
        if missing:
            raise NotFoundError(
                f"Cannot group: {len(missing)} node(s) not found",
                {"missing": missing},
            )
        group_id = uuid4()
        self._groups[group_id] = members
        logger.debug("group_created", group_id=str(group_id), size=len(members))
        self._publish(GroupCreated(group_id, frozenset(members)))
        return group_id

    def insert_group(self, group_id: UUID, node_ids: Iterable[UUID]) -> None:
        """Restore a group under a known id (used when loading a project)."""
        if group_id in self._groups:
            raise DuplicateIdError(f"Group id {group_id} already exists", {"group_id": group_id})
        members = set(node_ids)
        missing = [nid for nid in members if nid not in self._nodes]
        if missing:
            raise NotFoundError(
                f"Group {group_id} references {len(missing)} missing node(s)",
                {"group_id": group_id, "missing": missing},
            )
        self._groups[group_id] = members

    def ungroup(self, group_id: UUID) -> set[UUID]:
        members = self._groups.pop(group_id, None)
        if members is None:
            raise NotFoundError(f"Group {group_id} not found", {"group_id": group_id})
        self._publish(GroupRemoved(group_id))
        return members

    def group_members(self, group_id: UUID) -> set[UUID]:
        members = self._groups.get(group_id)
        if members is None:
            raise NotFoundError(f"Group {group_id} not found", {"group_id": group_id})
        return set(members)

    def groups(self) -> dict[UUID, set[UUID]]:
        return {gid: set(members) for gid, members in self._groups.items()}

    @property
    def group_count(self) -> int:
        return len(self._groups)

    # ------------------------------------------------------------------
    # Selection (opaque view state)
    # ------------------------------------------------------------------

    def select(self, ids: Iterable[UUID]) -> None:
        """Add ids to the selection; unknown ids are ignored."""
        for item in ids:
            if item in self._nodes:
                self._selected_nodes.add(item)
            elif item in self._edges:
                self._selected_edges.add(item)

    def clear_selection(self) -> None:
        self._selected_nodes.clear()
        self._selected_edges.clear()

    @property
    def selected_nodes(self) -> set[UUID]:
        return set(self._selected_nodes)

    @property
    def selected_edges(self) -> set[UUID]:
        return set(self._selected_edges)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_node(self, node_id: UUID) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(f"Node {node_id} not found", {"node_id": node_id})
        return node

    def _publish(self, event: object) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
