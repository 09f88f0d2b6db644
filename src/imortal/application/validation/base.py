"""Validation protocol, diagnostic records and the aggregate report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol
from uuid import UUID

from imortal.domain.enums import DiagnosticKind, Severity

if TYPE_CHECKING:
    from imortal.domain.graph import ProjectGraph


@dataclass(frozen=True)
class Diagnostic:
    """One finding of one rule. Data, never raised."""

    rule: str
    kind: DiagnosticKind
    severity: Severity
    message: str
    node_id: UUID | None = None
    edge_id: UUID | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def __str__(self) -> str:
        return f"[{self.rule}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "node_id": str(self.node_id) if self.node_id else None,
            "edge_id": str(self.edge_id) if self.edge_id else None,
        }


class ValidationRule(Protocol):
    """Inspect a graph and report zero or more diagnostics.

    Rules are independent: none may depend on another having run, and none
    may mutate the graph.
    """

    name: str

    def check(self, graph: ProjectGraph) -> list[Diagnostic]: ...


@dataclass
class ValidationReport:
    """Result of one validation pass, in rule order then graph order."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(1 for d in self.diagnostics if d.is_error)

    @property
    def warnings(self) -> int:
        return sum(1 for d in self.diagnostics if d.is_warning)

    @property
    def is_valid(self) -> bool:
        return self.errors == 0

    def by_severity(self, severity: Severity) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is severity]

    def by_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    def for_node(self, node_id: UUID) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.node_id == node_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "errors": self.errors,
            "warnings": self.warnings,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
