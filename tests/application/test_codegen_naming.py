"""Tests for codegen identifier and type helpers."""

import pytest

from imortal.application.codegen.naming import pluralize, to_pascal_case, to_snake_case, to_table_name
from imortal.application.codegen.typemap import python_type, sql_type
from imortal.domain.enums import DatabaseBackend
from imortal.domain.types import (
    ANY,
    BOOL,
    INT64,
    JSON,
    STRING,
    UUID_TYPE,
    array,
    custom,
    entity,
    map_of,
    optional,
    reference,
)


class TestNaming:
    @pytest.mark.parametrize("name,expected", [
        ("TodoItem", "todo_item"),
        ("todo item", "todo_item"),
        ("HTTPServer", "http_server"),
        ("Create Todo", "create_todo"),
        ("2fa Setup", "_2fa_setup"),
        ("class", "class_"),
        ("", "unnamed"),
    ])
    def test_snake_case(self, name, expected):
        assert to_snake_case(name) == expected

    @pytest.mark.parametrize("name,expected", [
        ("todo item", "TodoItem"),
        ("user_profile", "UserProfile"),
        ("Todo", "Todo"),
    ])
    def test_pascal_case(self, name, expected):
        assert to_pascal_case(name) == expected

    @pytest.mark.parametrize("word,expected", [
        ("todo", "todos"),
        ("category", "categories"),
        ("day", "days"),
        ("box", "boxes"),
        ("match", "matches"),
    ])
    def test_pluralize(self, word, expected):
        assert pluralize(word) == expected

    def test_table_name(self):
        assert to_table_name("BlogPost") == "blog_posts"


class TestPythonType:
    def test_scalars(self):
        assert python_type(STRING) == "str"
        assert python_type(INT64) == "int"
        assert python_type(BOOL) == "bool"

    def test_collects_imports(self):
        imports: set[str] = set()
        assert python_type(map_of(STRING, optional(UUID_TYPE)), imports) == "dict[str, UUID | None]"
        assert imports == {"from uuid import UUID"}

    def test_json_needs_any(self):
        imports: set[str] = set()
        python_type(JSON, imports)
        assert "from typing import Any" in imports

    def test_entities(self):
        assert python_type(array(entity("blog post"))) == "list[BlogPost]"
        assert python_type(entity("User"), entities_as_ids=True) == "UUID"
        assert python_type(reference("User")) == "UUID"

    def test_custom_is_opaque(self):
        assert python_type(custom("billing", "Money")) == "Any"


class TestSqlType:
    @pytest.mark.parametrize("backend,expected", [
        (DatabaseBackend.POSTGRES, "UUID"),
        (DatabaseBackend.MYSQL, "CHAR(36)"),
        (DatabaseBackend.SQLITE, "TEXT"),
    ])
    def test_references_use_id_type(self, backend, expected):
        assert sql_type(reference("User"), backend) == expected

    def test_optional_unwrapped(self):
        assert sql_type(optional(INT64), DatabaseBackend.POSTGRES) == "BIGINT"

    @pytest.mark.parametrize("data_type", [array(STRING), map_of(STRING, ANY), ANY])
    def test_structured_types_stored_as_json(self, data_type):
        assert sql_type(data_type, DatabaseBackend.POSTGRES) == "JSONB"
