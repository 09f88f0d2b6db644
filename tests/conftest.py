"""Shared fixtures: a built-in registry and a small Todo project graph."""

import pytest

from imortal.application.components.registry import ComponentRegistry
from imortal.domain.entities import Edge, Field, ProjectMeta
from imortal.domain.graph import ProjectGraph
from imortal.domain.types import BOOL, STRING


@pytest.fixture
def registry():
    return ComponentRegistry.with_builtins()


@pytest.fixture
def graph():
    return ProjectGraph(ProjectMeta(name="Test Project"))


@pytest.fixture
def todo_graph(registry):
    """Todo entity (title, completed) feeding a POST endpoint.

    Nodes: Todo (data.entity), Create Todo (api.rest, POST /todos)
    Edges: Todo.entity -> Create Todo.request (DataFlow)
    """
    g = ProjectGraph(ProjectMeta(name="Todo App", description="Tracks things to do"))
    todo = registry.instantiate("data.entity", "Todo")
    todo.add_field(Field(name="title", data_type=STRING, required=True))
    todo.add_field(Field(name="completed", data_type=BOOL, default_value=False))
    g.add_node(todo)

    endpoint = registry.instantiate("api.rest", "Create Todo")
    endpoint.config["method"] = "POST"
    endpoint.config["path"] = "/todos"
    g.add_node(endpoint)

    g.add_edge(Edge.data_flow(todo.id, "entity", endpoint.id, "request"))
    return g
