"""Tests for imortal.domain.types."""

import pytest
from pydantic import ValidationError

from imortal.domain.enums import ConnectionKind, RelationType, TypeKind
from imortal.domain.types import (
    ANY,
    INT32,
    STRING,
    ConnectionType,
    DataType,
    array,
    custom,
    entity,
    map_of,
    optional,
    reference,
)


class TestDataTypeShape:
    @pytest.mark.parametrize("kind", [TypeKind.OPTIONAL, TypeKind.ARRAY])
    def test_wrappers_need_inner(self, kind):
        with pytest.raises(ValidationError):
            DataType(kind=kind)

    def test_map_needs_key_and_value(self):
        with pytest.raises(ValidationError):
            DataType(kind=TypeKind.MAP, inner=STRING)

    @pytest.mark.parametrize("kind", [TypeKind.ENTITY, TypeKind.REFERENCE])
    def test_named_types_need_name(self, kind):
        with pytest.raises(ValidationError):
            DataType(kind=kind)

    def test_custom_needs_domain(self):
        with pytest.raises(ValidationError):
            DataType(kind=TypeKind.CUSTOM, name="Money")

    def test_frozen(self):
        with pytest.raises(ValidationError):
            STRING.kind = TypeKind.TEXT


class TestDataTypeQueries:
    def test_equality_is_structural(self):
        assert optional(STRING) == optional(STRING)
        assert entity("User") != entity("Post")

    def test_scalar_and_numeric(self):
        assert STRING.is_scalar
        assert INT32.is_numeric
        assert not array(STRING).is_scalar
        assert not STRING.is_numeric

    def test_entity_name_looks_through_wrappers(self):
        assert array(optional(entity("User"))).entity_name() == "User"
        assert reference("Post").entity_name() == "Post"
        assert STRING.entity_name() is None

    def test_bind_entity_replaces_placeholder_only(self):
        bound = array(entity("Self")).bind_entity("Self", "Todo")
        assert bound == array(entity("Todo"))
        assert entity("User").bind_entity("Self", "Todo") == entity("User")

    @pytest.mark.parametrize("data_type,expected", [
        (STRING, "String"),
        (optional(INT32), "Optional<Int32>"),
        (array(entity("User")), "Array<Entity<User>>"),
        (map_of(STRING, ANY), "Map<String, Any>"),
        (custom("billing", "Money"), "billing::Money"),
    ])
    def test_display(self, data_type, expected):
        assert str(data_type) == expected


class TestConnectionType:
    def test_relationship_requires_relation(self):
        with pytest.raises(ValidationError):
            ConnectionType(kind=ConnectionKind.RELATIONSHIP)

    def test_non_relationship_rejects_relation(self):
        with pytest.raises(ValidationError):
            ConnectionType(kind=ConnectionKind.DATA_FLOW, relation=RelationType.ONE_TO_ONE)

    def test_display(self):
        assert ConnectionType.data_flow().display() == "data_flow"
        rel = ConnectionType.relationship(RelationType.ONE_TO_MANY)
        assert rel.is_relationship
        assert rel.display() == f"relationship({RelationType.ONE_TO_MANY.value})"
