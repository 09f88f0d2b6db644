"""Validation rules.

The default set, in order: primary keys, dangling ports, unconnected API
endpoints, DataFlow payload types.  Three optional rules (duplicate names,
disabled edges, DataFlow cycles) can be added by callers.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

import networkx as nx

from imortal.application.components.definition import BuiltinComponent
from imortal.application.validation.base import Diagnostic, ValidationRule
from imortal.domain.enums import ComponentCategory, ConnectionKind, DiagnosticKind, Severity
from imortal.domain.rules import check_edge_ports, is_type_compatible

if TYPE_CHECKING:
    from imortal.domain.graph import ProjectGraph

_ENTITY = BuiltinComponent.DATA_ENTITY.value


class PrimaryKeyRule:
    """Every entity needs at least one primary-key field."""

    name = "primary_key"

    def check(self, graph: ProjectGraph) -> list[Diagnostic]:
        return [
            Diagnostic(
                rule=self.name,
                kind=DiagnosticKind.PRIMARY_KEY_MISSING,
                severity=Severity.ERROR,
                message=f"Entity '{node.name}' has no primary key field",
                node_id=node.id,
            )
            for node in graph.nodes_by_type(_ENTITY)
            if not node.primary_key_fields()
        ]


class DanglingPortRule:
    """Every edge's ports must still exist on its endpoint nodes."""

    name = "dangling_port"

    def check(self, graph: ProjectGraph) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        for edge in graph.edges():
            from_node = graph.get_node(edge.from_node)
            to_node = graph.get_node(edge.to_node)
            if from_node is None or to_node is None:
                message = f"Edge {edge.id} references a node that no longer exists"
            else:
                result = check_edge_ports(edge, from_node, to_node)
                if result.ok:
                    continue
                message = result.problem
            found.append(
                Diagnostic(
                    rule=self.name,
                    kind=DiagnosticKind.DANGLING_PORT,
                    severity=Severity.ERROR,
                    message=message,
                    edge_id=edge.id,
                )
            )
        return found


class UnconnectedEndpointRule:
    """API nodes without any DataFlow or Trigger edge are incomplete."""

    name = "unconnected_endpoint"
    connecting = {ConnectionKind.DATA_FLOW, ConnectionKind.TRIGGER}

    def check(self, graph: ProjectGraph) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        for node in graph.nodes_by_category(ComponentCategory.API):
            connected = any(
                e.connection_type.kind in self.connecting for e in graph.edges_of(node.id)
            )
            if not connected:
                found.append(
                    Diagnostic(
                        rule=self.name,
                        kind=DiagnosticKind.UNCONNECTED,
                        severity=Severity.WARNING,
                        message=f"API endpoint '{node.name}' has no connected entity or trigger",
                        node_id=node.id,
                    )
                )
        return found


class PortTypeCompatibilityRule:
    """DataFlow edges must carry compatible payload types.

    Relationship edges describe schema, not payload, and are skipped; edges
    whose ports cannot be resolved are left to :class:`DanglingPortRule`.
    """

    name = "port_type_compatibility"

    def check(self, graph: ProjectGraph) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        for edge in graph.edges():
            if edge.connection_type.kind is not ConnectionKind.DATA_FLOW:
                continue
            from_node = graph.get_node(edge.from_node)
            to_node = graph.get_node(edge.to_node)
            if from_node is None or to_node is None:
                continue
            ports = check_edge_ports(edge, from_node, to_node)
            if not ports.ok:
                continue
            source, sink = ports.from_port.data_type, ports.to_port.data_type
            if not is_type_compatible(source, sink):
                found.append(
                    Diagnostic(
                        rule=self.name,
                        kind=DiagnosticKind.PORT_TYPE_MISMATCH,
                        severity=Severity.ERROR,
                        message=(
                            f"Cannot connect {from_node.name}.{edge.from_port} ({source}) "
                            f"to {to_node.name}.{edge.to_port} ({sink})"
                        ),
                        edge_id=edge.id,
                    )
                )
        return found


# ---------------------------------------------------------------------------
# Optional rules
# ---------------------------------------------------------------------------


class DuplicateNameRule:
    """Nodes of the same component type should have distinct names.

    Generated paths derive from node names, so duplicates usually end in a
    path collision at generation time.
    """

    name = "duplicate_name"

    def check(self, graph: ProjectGraph) -> list[Diagnostic]:
        seen: dict[tuple[str, str], list] = defaultdict(list)
        for node in graph.nodes():
            seen[(node.component_type, node.name.strip().lower())].append(node)
        found: list[Diagnostic] = []
        for nodes in seen.values():
            for duplicate in nodes[1:]:
                found.append(
                    Diagnostic(
                        rule=self.name,
                        kind=DiagnosticKind.DUPLICATE_NAME,
                        severity=Severity.WARNING,
                        message=f"Duplicate {duplicate.component_type} name '{duplicate.name}'",
                        node_id=duplicate.id,
                    )
                )
        return found


class DisabledEdgeRule:
    name = "disabled_edge"

    def check(self, graph: ProjectGraph) -> list[Diagnostic]:
        return [
            Diagnostic(
                rule=self.name,
                kind=DiagnosticKind.DISABLED_EDGE,
                severity=Severity.INFO,
                message=f"Connection {edge.from_port} -> {edge.to_port} is disabled",
                edge_id=edge.id,
            )
            for edge in graph.edges()
            if not edge.enabled
        ]


class CyclicDataFlowRule:
    """Enabled DataFlow edges should not loop back on themselves.

    Edges of other kinds may form cycles freely.  One diagnostic per
    strongly connected group, attached to its earliest node.
    """

    name = "cyclic_dependency"

    def check(self, graph: ProjectGraph) -> list[Diagnostic]:
        flow = nx.DiGraph()
        for edge in graph.edges():
            if edge.enabled and edge.connection_type.kind is ConnectionKind.DATA_FLOW:
                flow.add_edge(edge.from_node, edge.to_node)
        order = {node.id: index for index, node in enumerate(graph.nodes())}
        found: list[Diagnostic] = []
        components = [c for c in nx.strongly_connected_components(flow) if len(c) > 1]
        for component in sorted(components, key=lambda c: min(order.get(n, 0) for n in c)):
            members = sorted(component, key=lambda n: order.get(n, 0))
            names = [graph.get_node(n).name for n in members if graph.get_node(n) is not None]
            found.append(
                Diagnostic(
                    rule=self.name,
                    kind=DiagnosticKind.CYCLIC_DEPENDENCY,
                    severity=Severity.WARNING,
                    message=f"DataFlow cycle between {', '.join(names)}",
                    node_id=members[0],
                )
            )
        return found


def default_rules() -> list[ValidationRule]:
    """The standard rule set, in reporting order."""
    return [
        PrimaryKeyRule(),
        DanglingPortRule(),
        UnconnectedEndpointRule(),
        PortTypeCompatibilityRule(),
    ]


def extended_rules() -> list[ValidationRule]:
    return [*default_rules(), DuplicateNameRule(), DisabledEdgeRule(), CyclicDataFlowRule()]
