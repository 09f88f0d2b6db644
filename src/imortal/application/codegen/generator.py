"""Turn a project graph into a set of generated source files.

Nodes are visited in insertion order and dispatched to the emitter whose
prefix matches their component type. Node-scoped failures are recorded
and generation continues; a path collision aborts the run.
"""

from __future__ import annotations

from imortal.application.codegen.base import (
    Emitter,
    GeneratedProject,
    GenerationFailure,
    GeneratorConfig,
    NodeContext,
)
from imortal.application.codegen.emitters.api import ApiEmitter
from imortal.application.codegen.emitters.auth import AuthEmitter
from imortal.application.codegen.emitters.data import DataEmitter
from imortal.application.codegen.emitters.logic import LogicEmitter
from imortal.application.codegen.emitters.project import project_files
from imortal.application.codegen.emitters.storage import StorageEmitter
from imortal.application.codegen.templates import TemplateRenderer
from imortal.config.logging import get_logger
from imortal.domain.entities import Node
from imortal.domain.exceptions import TemplateRenderError, UnsupportedComponentError
from imortal.domain.graph import ProjectGraph

logger = get_logger(__name__)


def default_emitters() -> list[Emitter]:
    return [DataEmitter(), ApiEmitter(), StorageEmitter(), AuthEmitter(), LogicEmitter()]


class CodeGenerator:
    """Generates a Python service from a project graph."""

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        renderer: TemplateRenderer | None = None,
        emitters: list[Emitter] | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.renderer = renderer or TemplateRenderer()
        self._emitters = emitters if emitters is not None else default_emitters()

    def emitter_for(self, node: Node) -> Emitter | None:
        for emitter in self._emitters:
            if node.component_type.startswith(emitter.prefix):
                return emitter
        return None

    def generate(self, graph: ProjectGraph) -> GeneratedProject:
        """Generate every node, then the project-level files.

        Raises:
            PathCollisionError: two outputs resolved to the same path.
        """
        project = GeneratedProject(name=graph.meta.name)

        for node in graph.nodes():
            ctx = NodeContext.build(graph, node, self.config, self.renderer)
            try:
                emitter = self.emitter_for(node)
                if emitter is None:
                    raise UnsupportedComponentError(node.id, node.component_type)
                files = emitter.emit(ctx)
            except (UnsupportedComponentError, TemplateRenderError) as exc:
                logger.warning(
                    "node_generation_failed",
                    node=node.name,
                    component_type=node.component_type,
                    error=exc.message,
                )
                project.failures.append(GenerationFailure(node.id, node.name, exc))
                continue
            for generated in files:
                project.add(generated)
            project.warnings.extend(ctx.warnings)

        for generated in project_files(graph, project, self.config, self.renderer):
            project.add(generated)

        logger.info(
            "generation_complete",
            project=project.name,
            files=project.file_count,
            warnings=len(project.warnings),
            failures=len(project.failures),
        )
        return project


def generate(graph: ProjectGraph, config: GeneratorConfig | None = None) -> GeneratedProject:
    """Generate *graph* with the default emitters."""
    return CodeGenerator(config).generate(graph)
