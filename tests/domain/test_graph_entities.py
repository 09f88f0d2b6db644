"""Tests for imortal.domain.entities and imortal.domain.rules."""

import pytest

from imortal.domain.entities import Edge, Field, FieldConstraint, Node, Viewport
from imortal.domain.enums import ConstraintKind, ForeignKeyAction, RelationType
from imortal.domain.exceptions import DuplicateIdError, NotFoundError, SystemFieldError
from imortal.domain.rules import check_edge_ports, is_type_compatible
from imortal.domain.types import ANY, INT32, STRING, UUID_TYPE, entity


class TestField:
    def test_primary_key_helpers(self):
        field = Field(name="id", data_type=UUID_TYPE)
        assert not field.is_primary_key
        pk = field.as_primary_key()
        assert pk.is_primary_key
        assert pk.required
        assert pk.as_primary_key().constraints == pk.constraints

    def test_has_constraint(self):
        field = Field(name="email", data_type=STRING, constraints=[FieldConstraint.unique()])
        assert field.is_unique
        assert not field.has_constraint(ConstraintKind.INDEXED)

    def test_foreign_key_action_sql(self):
        fk = FieldConstraint.foreign_key("User", on_delete=ForeignKeyAction.SET_NULL)
        assert fk.entity == "User"
        assert fk.field == "id"
        assert fk.on_delete.to_sql() == "SET NULL"


class TestNode:
    def test_field_lookup_and_removal(self):
        node = Node(component_type="custom.thing", name="Thing")
        node.add_field(Field(name="label", data_type=STRING))
        with pytest.raises(DuplicateIdError):
            node.add_field(Field(name="label", data_type=STRING))
        with pytest.raises(NotFoundError):
            node.remove_field("missing")
        assert node.remove_field("label").name == "label"
        assert node.fields == []

    def test_system_field_cannot_be_removed(self):
        node = Node(
            component_type="custom.thing",
            name="Thing",
            fields=[Field(name="id", data_type=UUID_TYPE, system=True)],
        )
        with pytest.raises(SystemFieldError):
            node.remove_field("id")

    def test_typed_config_access(self):
        node = Node(component_type="custom.thing", name="Thing", config={"a": "x", "b": True, "c": 3})
        assert node.get_config_str("a") == "x"
        assert node.get_config_str("b") == ""
        assert node.get_config_bool("b") is True
        assert node.get_config_bool("a", default=True) is True
        assert node.get_config("c") == 3
        assert node.get_config("missing", 7) == 7


class TestViewport:
    @pytest.mark.parametrize("zoom,expected", [(0.0, 0.1), (1.5, 1.5), (50.0, 5.0)])
    def test_zoom_clamped(self, zoom, expected):
        assert Viewport(zoom=zoom).zoom == expected


class TestEdge:
    def test_relationship_factory(self, registry):
        a, b = registry.instantiate("data.entity", "A"), registry.instantiate("data.entity", "B")
        edge = Edge.relationship(a.id, b.id, RelationType.MANY_TO_MANY)
        assert (edge.from_port, edge.to_port) == ("entity", "entity")
        assert edge.connection_type.relation is RelationType.MANY_TO_MANY
        assert edge.peer(a.id) == b.id
        assert edge.touches(b.id)


class TestTypeCompatibility:
    @pytest.mark.parametrize("source,sink,expected", [
        (STRING, STRING, True),
        (entity("Todo"), ANY, True),
        (entity("Todo"), entity("Todo"), True),
        (entity("Todo"), entity("User"), False),
        (STRING, ANY, False),
        (INT32, STRING, False),
    ])
    def test_is_type_compatible(self, source, sink, expected):
        assert is_type_compatible(source, sink) is expected


class TestCheckEdgePorts:
    def test_ordinary_edge_resolves_output_and_input(self, registry):
        todo = registry.instantiate("data.entity", "Todo")
        rest = registry.instantiate("api.rest", "Endpoint")
        check = check_edge_ports(Edge.data_flow(todo.id, "entity", rest.id, "request"), todo, rest)
        assert check.ok
        assert check.from_port.name == "entity"
        assert check.to_port.name == "request"

    def test_missing_port_reported(self, registry):
        todo = registry.instantiate("data.entity", "Todo")
        rest = registry.instantiate("api.rest", "Endpoint")
        check = check_edge_ports(Edge.data_flow(todo.id, "entity", rest.id, "ghost"), todo, rest)
        assert not check.ok
        assert "no port named 'ghost'" in check.problem
