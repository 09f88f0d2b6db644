"""Persisted project document (JSON).

Layout::

    {"ir_version": "1.0.0", "format": "imortal",
     "project": {"meta": {...}, "nodes": {"<uuid>": Node},
                 "edges": {"<uuid>": Edge}, "groups": {"<uuid>": [...]},
                 "viewport": {...}}}

Loading never trusts the file: records are re-validated, and edges and
groups are re-inserted through the graph so every structural check that
guards interactive edits also guards hand-edited documents.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError

from imortal import FORMAT_NAME, IR_VERSION
from imortal.application.codegen.base import GeneratedProject
from imortal.config.logging import get_logger
from imortal.domain.entities import Edge, Node, ProjectMeta, Viewport
from imortal.domain.exceptions import GraphError, SchemaError
from imortal.domain.graph import ProjectGraph

logger = get_logger(__name__)

PROJECT_SUFFIX = ".imortal"


class ProjectBody(BaseModel):
    meta: ProjectMeta
    nodes: dict[str, Node] = Field(default_factory=dict)
    edges: dict[str, Edge] = Field(default_factory=dict)
    groups: dict[str, list[UUID]] = Field(default_factory=dict)
    viewport: Viewport = Field(default_factory=Viewport)


class ProjectDocument(BaseModel):
    ir_version: str
    format: str = FORMAT_NAME
    project: ProjectBody


def _major(version: str) -> str:
    return version.split(".", 1)[0]


# ---------------------------------------------------------------------------
# Graph ↔ document
# ---------------------------------------------------------------------------


def to_document(graph: ProjectGraph) -> ProjectDocument:
    return ProjectDocument(
        ir_version=IR_VERSION,
        project=ProjectBody(
            meta=graph.meta,
            nodes={str(n.id): n for n in graph.nodes()},
            edges={str(e.id): e for e in graph.edges()},
            groups={str(gid): sorted(members, key=str) for gid, members in graph.groups().items()},
            viewport=graph.viewport,
        ),
    )


def from_document(data: dict[str, Any] | ProjectDocument) -> ProjectGraph:
    """Build a graph from a parsed document.

    Raises:
        SchemaError: wrong shape, unsupported version, or broken references.
    """
    try:
        document = (
            data if isinstance(data, ProjectDocument) else ProjectDocument.model_validate(data)
        )
    except ValidationError as exc:
        raise SchemaError(
            f"Invalid project document: {exc.error_count()} error(s)",
            {"errors": exc.errors(include_url=False)},
        ) from exc

    if _major(document.ir_version) != _major(IR_VERSION):
        raise SchemaError(
            f"Unsupported ir_version {document.ir_version!r} (expected {IR_VERSION})",
            {"ir_version": document.ir_version, "supported": IR_VERSION},
        )
    if document.format != FORMAT_NAME:
        raise SchemaError(
            f"Unknown document format {document.format!r}", {"format": document.format}
        )

    body = document.project
    graph = ProjectGraph(body.meta)
    graph.viewport = body.viewport
    try:
        for key, node in body.nodes.items():
            _check_key("node", key, node.id)
            graph.add_node(node)
        for key, edge in body.edges.items():
            _check_key("edge", key, edge.id)
            graph.add_edge(edge)
        for key, members in body.groups.items():
            graph.insert_group(_parse_id("group", key), members)
    except GraphError as exc:
        raise SchemaError(f"Inconsistent project document: {exc.message}", exc.details) from exc

    logger.debug(
        "project_loaded",
        project=graph.meta.name,
        nodes=graph.node_count,
        edges=graph.edge_count,
    )
    return graph


def _parse_id(kind: str, key: str) -> UUID:
    try:
        return UUID(key)
    except ValueError as exc:
        raise SchemaError(f"Invalid {kind} id {key!r}", {"key": key}) from exc


def _check_key(kind: str, key: str, record_id: UUID) -> None:
    if _parse_id(kind, key) != record_id:
        raise SchemaError(
            f"{kind.capitalize()} key {key} does not match its id {record_id}",
            {"key": key, "id": str(record_id)},
        )


def dumps(graph: ProjectGraph, compact: bool = False) -> str:
    return to_document(graph).model_dump_json(indent=None if compact else 2)


def loads(text: str) -> ProjectGraph:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaError(f"Malformed JSON: {exc.msg}", {"line": exc.lineno}) from exc
    if not isinstance(data, dict):
        raise SchemaError("Project document must be a JSON object")
    return from_document(data)


# ---------------------------------------------------------------------------
# Filesystem adapter
# ---------------------------------------------------------------------------


class FilesystemProjectStore:
    """Read/write one project document on the local filesystem.

    Implements the ``ProjectStore`` port from ``imortal.domain.ports``.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def save(self, graph: ProjectGraph, compact: bool = False) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(dumps(graph, compact=compact), encoding="utf-8")
        logger.info("project_saved", path=str(self._path))

    def load(self) -> ProjectGraph:
        return loads(self._path.read_text(encoding="utf-8"))

    @staticmethod
    def write_generated(project: GeneratedProject, out_dir: str | Path) -> list[Path]:
        """Write every generated file under *out_dir*; return the written paths."""
        root = Path(out_dir)
        written = []
        for relative, generated in project.files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(generated.content, encoding="utf-8")
            written.append(target)
        logger.info("generated_written", out_dir=str(root), files=len(written))
        return written
