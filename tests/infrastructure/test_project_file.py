"""Tests for imortal.infrastructure.serialization.project_file."""

import json
from uuid import uuid4

import pytest

from imortal.application.codegen.generator import generate
from imortal.domain.enums import ConnectionKind
from imortal.domain.exceptions import SchemaError
from imortal.infrastructure.serialization.project_file import (
    FilesystemProjectStore,
    dumps,
    from_document,
    loads,
    to_document,
)


def _document(graph) -> dict:
    return json.loads(dumps(graph))


class TestRoundTrip:
    def test_graph_survives_dump_and_load(self, todo_graph):
        group_id = todo_graph.group([n.id for n in todo_graph.nodes()])
        todo_graph.viewport.zoom = 2.0

        loaded = loads(dumps(todo_graph))

        assert loaded.meta == todo_graph.meta
        assert [n.id for n in loaded.nodes()] == [n.id for n in todo_graph.nodes()]
        assert [n.name for n in loaded.nodes()] == ["Todo", "Create Todo"]
        assert loaded.get_node(todo_graph.nodes()[0].id).fields == todo_graph.nodes()[0].fields
        assert loaded.edges()[0].connection_type.kind is ConnectionKind.DATA_FLOW
        assert loaded.group_members(group_id) == todo_graph.group_members(group_id)
        assert loaded.viewport.zoom == 2.0

    def test_document_header(self, todo_graph):
        data = _document(todo_graph)
        assert data["ir_version"] == "1.0.0"
        assert data["format"] == "imortal"
        assert set(data["project"]["nodes"]) == {str(n.id) for n in todo_graph.nodes()}

    def test_compact_output(self, todo_graph):
        assert "\n" not in dumps(todo_graph, compact=True)

    def test_loaded_graph_generates_same_files(self, todo_graph):
        loaded = loads(dumps(todo_graph))
        assert generate(loaded).contents() == generate(todo_graph).contents()

    def test_document_model_accepted(self, todo_graph):
        assert from_document(to_document(todo_graph)).node_count == 2


class TestRejectedDocuments:
    def test_major_version_mismatch(self, todo_graph):
        data = _document(todo_graph)
        data["ir_version"] = "2.0.0"
        with pytest.raises(SchemaError, match="Unsupported ir_version"):
            from_document(data)

    def test_minor_version_accepted(self, todo_graph):
        data = _document(todo_graph)
        data["ir_version"] = "1.4.0"
        assert from_document(data).node_count == 2

    def test_wrong_format(self, todo_graph):
        data = _document(todo_graph)
        data["format"] = "something-else"
        with pytest.raises(SchemaError, match="Unknown document format"):
            from_document(data)

    def test_dangling_edge(self, todo_graph):
        data = _document(todo_graph)
        edge = next(iter(data["project"]["edges"].values()))
        edge["to_node"] = str(uuid4())
        with pytest.raises(SchemaError, match="Inconsistent project document"):
            from_document(data)

    def test_key_must_match_id(self, todo_graph):
        data = _document(todo_graph)
        nodes = data["project"]["nodes"]
        key = next(iter(nodes))
        nodes[str(uuid4())] = nodes.pop(key)
        with pytest.raises(SchemaError, match="does not match its id"):
            from_document(data)

    def test_missing_meta(self):
        with pytest.raises(SchemaError, match="Invalid project document"):
            from_document({"ir_version": "1.0.0", "project": {}})

    @pytest.mark.parametrize("text", ["{not json", "[1, 2]"])
    def test_malformed_text(self, text):
        with pytest.raises(SchemaError):
            loads(text)


class TestFilesystemProjectStore:
    def test_save_and_load(self, tmp_path, todo_graph):
        store = FilesystemProjectStore(tmp_path / "projects" / "todo.imortal")
        assert not store.exists()

        store.save(todo_graph)

        assert store.exists()
        assert store.load().meta.name == "Todo App"

    def test_write_generated(self, tmp_path, todo_graph):
        project = generate(todo_graph)

        written = FilesystemProjectStore.write_generated(project, tmp_path / "out")

        assert len(written) == project.file_count
        model = tmp_path / "out" / "app" / "models" / "todo.py"
        assert model.read_text(encoding="utf-8") == project.get("app/models/todo.py").content


def test_store_satisfies_project_store_port(tmp_path):
    from imortal.domain.ports import ProjectStore

    assert isinstance(FilesystemProjectStore(tmp_path / "p.imortal"), ProjectStore)
