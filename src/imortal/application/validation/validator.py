"""Validate a project graph.

Runs every rule over the same graph snapshot and concatenates the results.
All rules always run; there is no early exit.
"""

from __future__ import annotations

from imortal.application.validation.base import ValidationReport, ValidationRule
from imortal.application.validation.rules import default_rules
from imortal.config.logging import get_logger
from imortal.domain.graph import ProjectGraph

logger = get_logger(__name__)


class Validator:
    """Ordered collection of validation rules."""

    def __init__(self, rules: list[ValidationRule] | None = None) -> None:
        self._rules: list[ValidationRule] = list(rules) if rules is not None else default_rules()

    @property
    def rules(self) -> list[ValidationRule]:
        return list(self._rules)

    def add_rule(self, rule: ValidationRule) -> None:
        self._rules.append(rule)

    def run(self, graph: ProjectGraph) -> ValidationReport:
        report = ValidationReport()
        for rule in self._rules:
            report.diagnostics.extend(rule.check(graph))

        logger.info(
            "validation_complete",
            project=graph.meta.name,
            errors=report.errors,
            warnings=report.warnings,
        )
        return report


def validate(graph: ProjectGraph) -> ValidationReport:
    """Validate *graph* with the default rule set."""
    return Validator().run(graph)
