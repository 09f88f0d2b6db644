"""Tests for imortal.application.codegen.generator and its emitters."""

import ast
import shutil

import pytest

from imortal.application.codegen.base import GeneratorConfig, env_vars, setting_expr
from imortal.application.codegen.generator import CodeGenerator, generate
from imortal.application.codegen.templates import TEMPLATES_DIR, TemplateRenderer
from imortal.domain.entities import Edge, Field, Node
from imortal.domain.enums import ComponentCategory, DatabaseBackend, FileType
from imortal.domain.exceptions import (
    PathCollisionError,
    TemplateRenderError,
    UnsupportedComponentError,
)
from imortal.domain.types import STRING


def _with_database(graph, registry, name="Main DB"):
    db = registry.instantiate("storage.database", name)
    graph.add_node(db)
    todo = graph.find_node_by_name("Todo")
    graph.add_edge(Edge.data_flow(todo.id, "entity", db.id, "entities"))
    return db


# ---------------------------------------------------------------------------
# Entities and endpoints
# ---------------------------------------------------------------------------


class TestTodoProject:
    def test_model(self, todo_graph):
        project = generate(todo_graph)
        model = project.get("app/models/todo.py")

        assert model is not None
        assert model.file_type is FileType.STRUCT
        assert "class Todo(BaseModel)" in model.content
        assert "title: str" in model.content
        assert "completed: bool = False" in model.content
        assert "id:" in model.content
        assert "created_at" in model.content
        assert "class TodoCreate(BaseModel)" in model.content

    def test_handler_uses_entity(self, todo_graph):
        handler = generate(todo_graph).get("app/handlers/create_todo.py")

        assert handler.file_type is FileType.HANDLER
        assert "from app.models.todo import Todo, TodoCreate" in handler.content
        assert "@router.post('/todos'" in handler.content
        assert "Payload" not in handler.content

    def test_no_migration_without_database(self, todo_graph):
        project = generate(todo_graph)
        assert project.by_type(FileType.MIGRATION) == []
        assert project.warnings == []
        assert not project.is_partial

    def test_project_files_come_last(self, todo_graph):
        paths = generate(todo_graph).paths()
        assert paths[:2] == ["app/models/todo.py", "app/handlers/create_todo.py"]
        assert paths[-1] == "README.md"
        assert "app/main.py" in paths
        assert "requirements.txt" in paths

    def test_main_includes_router(self, todo_graph):
        main = generate(todo_graph).get("app/main.py").content
        assert "from app.handlers import create_todo as handlers_create_todo" in main
        assert "app.include_router(handlers_create_todo.router)" in main

    def test_spaced_field_names_become_aliased_attributes(self, todo_graph):
        todo = todo_graph.find_node_by_name("Todo")
        todo.add_field(Field(name="Due Date", data_type=STRING))
        todo.add_field(Field(name="class", data_type=STRING))

        model = generate(todo_graph).get("app/models/todo.py").content

        ast.parse(model)
        assert "due_date: str | None = Field(default=None, alias='Due Date')" in model
        assert "class_: str | None = Field(default=None, alias='class')" in model
        assert "populate_by_name=True" in model
        assert "Due Date:" not in model

    def test_plain_names_need_no_alias(self, todo_graph):
        model = generate(todo_graph).get("app/models/todo.py").content
        assert "alias=" not in model
        assert "ConfigDict" not in model

    def test_generation_does_not_mutate(self, todo_graph):
        before = [n.model_dump() for n in todo_graph.nodes()]
        generate(todo_graph)
        assert [n.model_dump() for n in todo_graph.nodes()] == before


class TestDatabase:
    def test_connected_entity_gets_migration(self, todo_graph, registry):
        _with_database(todo_graph, registry)
        project = generate(todo_graph)

        migration = project.get("migrations/00000000000001_create_todos.sql")
        assert migration is not None
        assert "CREATE TABLE IF NOT EXISTS todos" in migration.content
        assert "DROP TABLE IF EXISTS todos;" in migration.content
        assert project.get("app/db.py") is not None

    def test_migrations_can_be_disabled(self, todo_graph, registry):
        _with_database(todo_graph, registry)
        project = generate(todo_graph, GeneratorConfig(generate_migrations=False))
        assert project.by_type(FileType.MIGRATION) == []

    def test_disabled_edge_means_no_migration(self, todo_graph, registry):
        _with_database(todo_graph, registry)
        todo_graph.edges()[-1].enabled = False
        assert generate(todo_graph).by_type(FileType.MIGRATION) == []

    @pytest.mark.parametrize("backend,column_type", [
        ("postgres", "VARCHAR(255)"),
        ("sqlite", "TEXT"),
    ])
    def test_backend_from_node(self, todo_graph, registry, backend, column_type):
        db = _with_database(todo_graph, registry)
        db.config["backend"] = backend
        migration = generate(todo_graph).by_type(FileType.MIGRATION)[0]
        assert f"title {column_type} NOT NULL" in migration.content

    def test_env_example_lists_placeholders(self, todo_graph, registry):
        _with_database(todo_graph, registry)
        env = generate(todo_graph).get(".env.example").content
        assert "DATABASE_URL=" in env
        assert "DATABASE_PASSWORD=" in env
        assert env.count("SECRET_KEY=") == 1


# ---------------------------------------------------------------------------
# Failures and warnings
# ---------------------------------------------------------------------------


class TestFailures:
    def test_path_collision_is_fatal(self, graph, registry):
        graph.add_node(registry.instantiate("data.entity", "Todo"))
        graph.add_node(registry.instantiate("data.entity", "Todo"))
        with pytest.raises(PathCollisionError) as exc_info:
            generate(graph)
        assert exc_info.value.details["path"] == "app/models/todo.py"

    def test_unsupported_component_is_collected(self, todo_graph):
        todo_graph.add_node(
            Node(component_type="ui.button", category=ComponentCategory.CUSTOM, name="Submit")
        )

        project = generate(todo_graph)

        assert project.is_partial
        assert len(project.failures) == 1
        failure = project.failures[0]
        assert failure.node_name == "Submit"
        assert isinstance(failure.error, UnsupportedComponentError)
        assert project.get("app/models/todo.py") is not None

    def test_unconnected_endpoint_uses_placeholder(self, graph, registry):
        graph.add_node(registry.instantiate("api.rest", "Ping"))

        project = generate(graph)

        handler = project.get("app/handlers/ping.py").content
        assert "Payload = dict[str, Any]" in handler
        assert len(project.warnings) == 1
        assert "placeholder" in project.warnings[0]
        assert project.warnings[0].startswith("Ping:")

    @pytest.mark.parametrize("value", ["lots", True, [1, 2]])
    def test_non_numeric_config_falls_back(self, graph, registry, value):
        cache = registry.instantiate("storage.cache", "Cache")
        cache.config["max_memory_mb"] = value
        graph.add_node(cache)
        graph.add_node(registry.instantiate("data.entity", "Todo"))

        project = generate(graph)

        assert project.failures == []
        assert len(project.warnings) == 1
        assert "max_memory_mb" in project.warnings[0]
        assert "131072" in project.get("app/cache.py").content
        assert project.get("app/models/todo.py") is not None

    def test_numeric_string_config_is_accepted(self, graph, registry):
        cache = registry.instantiate("storage.cache", "Cache")
        cache.config["max_memory_mb"] = "2"
        graph.add_node(cache)

        project = generate(graph)

        assert project.warnings == []
        assert "2048" in project.get("app/cache.py").content

    def test_custom_emitter_list(self, todo_graph):
        project = CodeGenerator(emitters=[]).generate(todo_graph)
        assert len(project.failures) == 2
        assert "app/main.py" in project.paths()


class TestTemplates:
    def test_every_builtin_renders(self, graph, registry):
        for component in registry.ids():
            graph.add_node(registry.instantiate(component, component.replace(".", " ").title()))

        project = generate(graph)

        assert project.failures == []
        assert "Test Project" in project.get(".env.example").content

    def test_env_example_names_project(self, todo_graph):
        env = generate(todo_graph).get(".env.example").content
        assert "Todo App" in env

    def test_broken_template_is_collected(self, todo_graph, tmp_path):
        templates = tmp_path / "templates"
        shutil.copytree(TEMPLATES_DIR, templates)
        (templates / "rest.py.j2").write_text("{{ missing_value }}\n", encoding="utf-8")

        project = CodeGenerator(renderer=TemplateRenderer(templates)).generate(todo_graph)

        assert len(project.failures) == 1
        failure = project.failures[0]
        assert failure.node_name == "Create Todo"
        assert isinstance(failure.error, TemplateRenderError)
        assert "rest.py.j2" in str(failure)
        assert project.get("app/models/todo.py") is not None
        assert project.get("app/handlers/create_todo.py") is None


# ---------------------------------------------------------------------------
# Other component families
# ---------------------------------------------------------------------------


class TestComponentFamilies:
    @pytest.mark.parametrize("component,name,path", [
        ("api.graphql", "Graph", "app/handlers/graph.py"),
        ("api.websocket", "Live Feed", "app/handlers/live_feed.py"),
        ("auth.login", "Login", "app/auth/login.py"),
        ("auth.register", "Sign Up", "app/auth/sign_up.py"),
        ("auth.logout", "Logout", "app/auth/logout.py"),
        ("auth.session", "Session", "app/auth/session.py"),
        ("logic.validator", "Check Title", "app/logic/check_title.py"),
        ("logic.transformer", "Shape", "app/logic/shape.py"),
        ("logic.condition", "Is Done", "app/logic/is_done.py"),
        ("storage.cache", "Cache", "app/cache.py"),
        ("storage.files", "Uploads", "app/storage.py"),
        ("data.collection", "All Todos", "app/queries/all_todos.py"),
        ("data.query", "Find Todos", "app/queries/find_todos.py"),
    ])
    def test_each_builtin_emits(self, graph, registry, component, name, path):
        graph.add_node(registry.instantiate(component, name))
        project = generate(graph)
        assert project.failures == []
        assert project.get(path) is not None

    def test_auth_routers_are_registered(self, graph, registry):
        graph.add_node(registry.instantiate("auth.login", "Login"))
        main = generate(graph).get("app/main.py").content
        assert "from app.auth import login as auth_login" in main

    def test_redis_cache_adds_requirement(self, graph, registry):
        cache = registry.instantiate("storage.cache", "Cache")
        cache.config["backend"] = "redis"
        graph.add_node(cache)
        assert "redis>=5.0" in generate(graph).get("requirements.txt").content


class TestConfig:
    def test_from_settings(self):
        from imortal.config.settings import Settings

        config = GeneratorConfig.from_settings(
            Settings(database_backend=DatabaseBackend.SQLITE, generate_migrations=False)
        )
        assert config.database_backend is DatabaseBackend.SQLITE
        assert not config.generate_migrations

    @pytest.mark.parametrize("value,expected", [
        ("${DATABASE_URL}", ["DATABASE_URL"]),
        ("postgres://${USER}:${PASS}@db", ["USER", "PASS"]),
        (["${A}", {"k": "${B}"}], ["A", "B"]),
        (5, []),
    ])
    def test_env_vars(self, value, expected):
        assert env_vars(value) == expected

    def test_setting_expr(self):
        assert setting_expr("${REDIS_URL}") == "get_settings().redis_url"
        assert setting_expr("prefix-${X}") == "'prefix-${X}'"
        assert setting_expr(10) == "10"
