"""Graph rules as pure functions.

Shared by the graph (checked on insertion), the validator (re-checked on
demand) and the project loader (checked on untrusted input).  No I/O, no
side-effects.
"""

from __future__ import annotations

from dataclasses import dataclass

from imortal.domain.entities import Edge, Node, Port
from imortal.domain.enums import TypeKind
from imortal.domain.types import DataType


# ---------------------------------------------------------------------------
# Payload type compatibility
# ---------------------------------------------------------------------------


def is_type_compatible(source: DataType, sink: DataType) -> bool:
    """Whether a value of type *source* may flow into a port typed *sink*.

    Accepted: identical types, or an ``Entity(X)`` flowing into ``Any``.
    """
    if source == sink:
        return True
    return source.kind is TypeKind.ENTITY and sink.kind is TypeKind.ANY


# ---------------------------------------------------------------------------
# Edge endpoint resolution
# ---------------------------------------------------------------------------


@dataclass
class PortCheck:
    """Outcome of resolving an edge's ports against its endpoint nodes."""

    from_port: Port | None
    to_port: Port | None
    problem: str | None = None

    @property
    def ok(self) -> bool:
        return self.problem is None


def check_edge_ports(edge: Edge, from_node: Node, to_node: Node) -> PortCheck:
    """Resolve ``edge.from_port`` / ``edge.to_port`` on their nodes.

    Ordinary edges need an output port on the source and an input port on
    the target.  Relationship edges only need the named ports to exist, in
    either direction, because entities expose their relationship port as an
    output on both ends.
    """
    if edge.connection_type.is_relationship:
        src = from_node.ports.get(edge.from_port)
        dst = to_node.ports.get(edge.to_port)
    else:
        src = from_node.ports.get_output(edge.from_port)
        dst = to_node.ports.get_input(edge.to_port)

    if src is None:
        return PortCheck(src, dst, _missing(from_node, edge.from_port, "output", edge))
    if dst is None:
        return PortCheck(src, dst, _missing(to_node, edge.to_port, "input", edge))
    return PortCheck(src, dst)


def _missing(node: Node, port: str, direction: str, edge: Edge) -> str:
    if not edge.connection_type.is_relationship and node.ports.get(port) is not None:
        return f"Port '{port}' on '{node.name}' is not an {direction} port"
    return f"Node '{node.name}' has no port named '{port}'"
