"""Code generation building blocks.

- GeneratorConfig: options for one generation run
- GeneratedFile / GeneratedProject: the output file set
- NodeContext: what an emitter sees of the graph around one node
- Emitter: the per-prefix generator protocol
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from pydantic import BaseModel

from imortal.domain.entities import Edge, Node
from imortal.domain.enums import ConnectionKind, DatabaseBackend, FileType
from imortal.domain.exceptions import CodegenError, PathCollisionError

if TYPE_CHECKING:
    from imortal.application.codegen.templates import TemplateRenderer
    from imortal.config.settings import Settings
    from imortal.domain.graph import ProjectGraph


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """Options for a generation run. Never read from the environment directly."""

    database_backend: DatabaseBackend = DatabaseBackend.POSTGRES
    generate_migrations: bool = True
    migration_version: str = "00000000000001"
    package_name: str = "app"

    @classmethod
    def from_settings(cls, settings: Settings) -> GeneratorConfig:
        return cls(
            database_backend=settings.database_backend,
            generate_migrations=settings.generate_migrations,
            migration_version=settings.migration_version,
        )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GeneratedFile:
    path: str
    content: str
    file_type: FileType
    node_id: UUID | None = None


@dataclass(frozen=True)
class GenerationFailure:
    """A node whose generation was skipped; the rest of the run went on."""

    node_id: UUID
    node_name: str
    error: CodegenError

    def __str__(self) -> str:
        return f"{self.node_name}: {self.error.message}"


@dataclass
class GeneratedProject:
    """Files keyed by relative path, in emission order."""

    name: str
    files: dict[str, GeneratedFile] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    failures: list[GenerationFailure] = field(default_factory=list)

    def add(self, generated: GeneratedFile) -> None:
        """Add a file; a second file at the same path is a fatal collision."""
        existing = self.files.get(generated.path)
        if existing is not None:
            raise PathCollisionError(generated.path, existing.node_id, generated.node_id)
        self.files[generated.path] = generated

    def get(self, path: str) -> GeneratedFile | None:
        return self.files.get(path)

    def paths(self) -> list[str]:
        return list(self.files.keys())

    def by_type(self, file_type: FileType) -> list[GeneratedFile]:
        return [f for f in self.files.values() if f.file_type is file_type]

    def contents(self) -> dict[str, str]:
        return {path: f.content for path, f in self.files.items()}

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)


# ---------------------------------------------------------------------------
# Emitter context
# ---------------------------------------------------------------------------


@dataclass
class NodeContext:
    """A node plus its resolved edges, handed to exactly one emitter."""

    node: Node
    graph: ProjectGraph
    config: GeneratorConfig
    renderer: TemplateRenderer
    incoming: list[tuple[Edge, Node]] = field(default_factory=list)
    outgoing: list[tuple[Edge, Node]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        graph: ProjectGraph,
        node: Node,
        config: GeneratorConfig,
        renderer: TemplateRenderer,
    ) -> NodeContext:
        incoming = [(e, graph.get_node(e.from_node)) for e in graph.edges_to(node.id)]
        outgoing = [(e, graph.get_node(e.to_node)) for e in graph.edges_from(node.id)]
        return cls(
            node=node,
            graph=graph,
            config=config,
            renderer=renderer,
            incoming=incoming,
            outgoing=outgoing,
        )

    def connected(
        self,
        component_type: str | None = None,
        kind: ConnectionKind | None = None,
    ) -> list[Node]:
        """Peers over enabled edges in either direction, without repeats."""
        peers: dict[UUID, Node] = {}
        for edge, peer in [*self.incoming, *self.outgoing]:
            if not edge.enabled:
                continue
            if kind is not None and edge.connection_type.kind is not kind:
                continue
            if component_type is not None and peer.component_type != component_type:
                continue
            peers.setdefault(peer.id, peer)
        return list(peers.values())

    def warn(self, message: str) -> None:
        self.warnings.append(f"{self.node.name}: {message}")

    def config_int(self, key: str, default: int) -> int:
        """Integer config value; anything unparsable warns and yields *default*."""
        value = self.node.get_config(key, default)
        if value is None or value == "":
            return default
        if not isinstance(value, bool) and isinstance(value, (int, float, str)):
            try:
                return int(value)
            except ValueError:
                pass
        self.warn(f"config '{key}' is not a whole number ({value!r}), using {default}")
        return default

    def render(self, template: str, **values: object) -> str:
        return self.renderer.render(template, **values)


class Emitter(Protocol):
    """Generates the files for every node whose type starts with ``prefix``."""

    prefix: str

    def emit(self, ctx: NodeContext) -> list[GeneratedFile]: ...


# ---------------------------------------------------------------------------
# Environment placeholders
# ---------------------------------------------------------------------------

ENV_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def env_vars(value: object) -> list[str]:
    """``${VAR}`` names referenced by a config value, nested values included."""
    if isinstance(value, str):
        return ENV_PLACEHOLDER.findall(value)
    if isinstance(value, list):
        return [name for item in value for name in env_vars(item)]
    if isinstance(value, dict):
        return [name for item in value.values() for name in env_vars(item)]
    return []


def setting_expr(value: object) -> str:
    """Python source for a config value in generated code.

    A value that is exactly one placeholder reads the matching settings
    attribute; anything else is emitted as a literal.
    """
    if isinstance(value, str):
        match = ENV_PLACEHOLDER.fullmatch(value)
        if match:
            return f"get_settings().{match.group(1).lower()}"
    return repr(value)
