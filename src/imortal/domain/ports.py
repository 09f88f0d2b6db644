"""Port definitions (hexagonal architecture).

The graph and the application services depend only on these Protocols,
never on concrete adapters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from imortal.domain.graph import ProjectGraph


@runtime_checkable
class EventBus(Protocol):
    """Publish/subscribe for domain events."""

    def publish(self, event: Any) -> None: ...
    def subscribe(self, event_type: type, handler: Callable[..., Any]) -> None: ...


@runtime_checkable
class ProjectStore(Protocol):
    """Load and save a project graph somewhere outside the core."""

    def save(self, graph: ProjectGraph) -> None: ...
    def load(self) -> ProjectGraph: ...
