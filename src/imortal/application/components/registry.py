"""Component registry: maps component ids to :class:`ComponentDefinition`.

Built-ins are seeded by :meth:`ComponentRegistry.with_builtins`; custom
definitions are registered at runtime into the same id-keyed map and may
shadow a built-in (last write wins).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from imortal.application.components.definition import ComponentDefinition
from imortal.config.logging import get_logger
from imortal.domain.entities import Node
from imortal.domain.enums import ComponentCategory

logger = get_logger(__name__)


@dataclass
class RegistryStats:
    total: int = 0
    by_category: dict[ComponentCategory, int] = field(default_factory=dict)


class ComponentRegistry:
    """Catalog of component definitions keyed by id, in registration order."""

    def __init__(self) -> None:
        self._definitions: dict[str, ComponentDefinition] = {}

    @classmethod
    def with_builtins(cls) -> ComponentRegistry:
        """Create a registry pre-loaded with the 16 built-in definitions."""
        from imortal.application.components.builtins.api import api_definitions
        from imortal.application.components.builtins.auth import auth_definitions
        from imortal.application.components.builtins.data import data_definitions
        from imortal.application.components.builtins.logic import logic_definitions
        from imortal.application.components.builtins.storage import storage_definitions

        registry = cls()
        for definitions in (
            auth_definitions(),
            data_definitions(),
            api_definitions(),
            storage_definitions(),
            logic_definitions(),
        ):
            for definition in definitions:
                registry.register(definition)
        return registry

    def register(self, definition: ComponentDefinition) -> None:
        """Register *definition*, replacing any definition with the same id."""
        if definition.id in self._definitions:
            logger.info("component_shadowed", component_id=definition.id)
        self._definitions[definition.id] = definition

    def get(self, component_id: str) -> ComponentDefinition | None:
        """Return the definition for *component_id*, or ``None``."""
        return self._definitions.get(component_id)

    def by_category(self, category: ComponentCategory) -> list[ComponentDefinition]:
        return [d for d in self._definitions.values() if d.category is category]

    def all(self) -> list[ComponentDefinition]:
        return list(self._definitions.values())

    def ids(self) -> list[str]:
        return list(self._definitions.keys())

    def search(self, query: str) -> list[ComponentDefinition]:
        """Case-insensitive match over id, name, description and tags."""
        return [d for d in self._definitions.values() if d.matches(query)]

    def instantiate(self, component_id: str, name: str | None = None) -> Node | None:
        """Create a node from a definition; ``None`` when the id is unknown."""
        definition = self._definitions.get(component_id)
        if definition is None:
            return None
        return definition.instantiate(name)

    def stats(self) -> RegistryStats:
        stats = RegistryStats(total=len(self._definitions))
        for definition in self._definitions.values():
            stats.by_category[definition.category] = (
                stats.by_category.get(definition.category, 0) + 1
            )
        return stats

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
