"""Custom exceptions for Immortal Engine."""

from __future__ import annotations

from uuid import UUID


class ImortalError(Exception):
    """Base exception for all Immortal Engine errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ---------------------------------------------------------------------------
# Structural: raised by ProjectGraph before any state changes
# ---------------------------------------------------------------------------


class GraphError(ImortalError):
    """Raised when a graph mutation request is invalid."""

    pass


class DuplicateIdError(GraphError):
    """Raised when inserting an element whose id (or name) already exists."""

    pass


class NotFoundError(GraphError):
    """Raised when a referenced node, edge, group or field does not exist."""

    pass


class PortMismatchError(GraphError):
    """Raised when an edge names a missing port or connects wrong directions."""

    pass


class SelfConnectionError(GraphError):
    """Raised when an edge would connect a node to itself."""

    pass


class SystemFieldError(GraphError):
    """Raised when removing a field the registry injected as a system field."""

    pass


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class SchemaError(ImortalError):
    """Raised when a project document cannot be accepted."""

    pass


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class CodegenError(ImortalError):
    """Base class for code generation errors."""

    pass


class PathCollisionError(CodegenError):
    """Raised when two nodes would emit the same output path. Aborts the run."""

    def __init__(self, path: str, first: UUID | None, second: UUID | None) -> None:
        super().__init__(
            f"Output path '{path}' would be written twice",
            {"path": path, "first_node": first, "second_node": second},
        )
        self.path = path


class UnsupportedComponentError(CodegenError):
    """No emitter exists for a node's component type. Node-scoped."""

    def __init__(self, node_id: UUID, component_type: str) -> None:
        super().__init__(
            f"No generator for component type '{component_type}'",
            {"node_id": node_id, "component_type": component_type},
        )
        self.node_id = node_id
        self.component_type = component_type


class TemplateRenderError(CodegenError):
    """A template failed to render for one node. Node-scoped."""

    pass


class ConfigurationError(ImortalError):
    """Raised when settings or generator options are invalid."""

    pass
