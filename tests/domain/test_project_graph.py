"""Tests for imortal.domain.graph.ProjectGraph."""

from uuid import uuid4

import pytest

from imortal.domain.entities import Edge, Field
from imortal.domain.enums import ComponentCategory, RelationType
from imortal.domain.events import EdgeAdded, GroupCreated, NodeAdded, NodeChanged, NodeRemoved
from imortal.domain.exceptions import (
    DuplicateIdError,
    NotFoundError,
    PortMismatchError,
    SelfConnectionError,
    SystemFieldError,
)
from imortal.domain.graph import ProjectGraph
from imortal.domain.types import STRING, entity
from imortal.infrastructure.events.bus import EventRecorder, InMemoryEventBus


def _entity(registry, name):
    return registry.instantiate("data.entity", name)


def _rest(registry, name="Endpoint"):
    return registry.instantiate("api.rest", name)


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class TestNodes:
    def test_add_and_get(self, graph, registry):
        node = _entity(registry, "User")
        assert graph.add_node(node) == node.id
        assert graph.get_node(node.id) is node
        assert graph.contains_node(node.id)
        assert graph.node_count == 1

    def test_duplicate_id_rejected(self, graph, registry):
        node = _entity(registry, "User")
        graph.add_node(node)
        with pytest.raises(DuplicateIdError):
            graph.add_node(node)
        assert graph.node_count == 1

    def test_insertion_order(self, graph, registry):
        names = ["A", "B", "C"]
        for name in names:
            graph.add_node(_entity(registry, name))
        assert [n.name for n in graph.nodes()] == names

    def test_unknown_node_lookups(self, graph):
        assert graph.get_node(uuid4()) is None
        assert graph.neighbors_out(uuid4()) == []
        assert graph.neighbors_in(uuid4()) == []
        with pytest.raises(NotFoundError):
            graph.remove_node(uuid4())

    def test_filters(self, graph, registry):
        graph.add_node(_entity(registry, "User"))
        graph.add_node(_rest(registry))
        assert [n.name for n in graph.nodes_by_category(ComponentCategory.API)] == ["Endpoint"]
        assert [n.name for n in graph.nodes_by_type("data.entity")] == ["User"]
        assert graph.find_node_by_name("User") is not None
        assert graph.entity_names() == {"User"}


class TestRemoveNodeCascade:
    def test_removes_incident_edges(self, graph, registry):
        user, endpoint, other = _entity(registry, "User"), _rest(registry), _rest(registry, "Other")
        for node in (user, endpoint, other):
            graph.add_node(node)
        e1 = graph.add_edge(Edge.data_flow(user.id, "entity", endpoint.id, "request"))
        e2 = graph.add_edge(Edge.data_flow(user.id, "list", other.id, "request"))

        graph.remove_node(user.id)

        assert graph.get_edge(e1) is None
        assert graph.get_edge(e2) is None
        assert graph.edge_count == 0
        assert all(not e.touches(user.id) for e in graph.edges())
        assert graph.neighbors_in(endpoint.id) == []

    def test_removes_group_and_selection_membership(self, graph, registry):
        a, b = _entity(registry, "A"), _entity(registry, "B")
        graph.add_node(a)
        graph.add_node(b)
        group_id = graph.group([a.id, b.id])
        graph.select([a.id])

        graph.remove_node(a.id)

        assert graph.group_members(group_id) == {b.id}
        assert graph.selected_nodes == set()


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------


class TestEdges:
    def test_add_then_remove_is_inverse(self, graph, registry):
        user, endpoint = _entity(registry, "User"), _rest(registry)
        graph.add_node(user)
        graph.add_node(endpoint)
        before = (graph.node_count, graph.edge_count, graph.neighbors_out(user.id))

        edge_id = graph.add_edge(Edge.data_flow(user.id, "entity", endpoint.id, "request"))
        assert graph.neighbors_out(user.id) == [endpoint.id]
        graph.remove_edge(edge_id)

        assert (graph.node_count, graph.edge_count, graph.neighbors_out(user.id)) == before

    def test_self_loop_rejected(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        with pytest.raises(SelfConnectionError):
            graph.add_edge(Edge.relationship(user.id, user.id, RelationType.ONE_TO_MANY))
        assert graph.edge_count == 0

    def test_missing_endpoint_rejected(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        with pytest.raises(NotFoundError):
            graph.add_edge(Edge.data_flow(user.id, "entity", uuid4(), "request"))

    def test_unknown_port_rejected(self, graph, registry):
        user, endpoint = _entity(registry, "User"), _rest(registry)
        graph.add_node(user)
        graph.add_node(endpoint)
        with pytest.raises(PortMismatchError):
            graph.add_edge(Edge.data_flow(user.id, "nope", endpoint.id, "request"))

    def test_wrong_direction_rejected(self, graph, registry):
        user, endpoint = _entity(registry, "User"), _rest(registry)
        graph.add_node(user)
        graph.add_node(endpoint)
        # "response" is an output of the endpoint, not an input
        with pytest.raises(PortMismatchError, match="not an input port"):
            graph.add_edge(Edge.data_flow(user.id, "entity", endpoint.id, "response"))

    def test_relationship_uses_output_ports_on_both_ends(self, graph, registry):
        user, post = _entity(registry, "User"), _entity(registry, "Post")
        graph.add_node(user)
        graph.add_node(post)
        graph.add_edge(Edge.relationship(user.id, post.id, RelationType.ONE_TO_MANY))
        assert graph.neighbors_out(user.id) == [post.id]

    def test_dependency_edges_follow_port_directions(self, graph, registry):
        user, post = _entity(registry, "User"), _entity(registry, "Post")
        graph.add_node(user)
        graph.add_node(post)
        with pytest.raises(PortMismatchError):
            graph.add_edge(Edge.dependency(user.id, "entity", post.id, "entity"))

    def test_parallel_edges_allowed_and_neighbors_deduplicated(self, graph, registry):
        user, endpoint = _entity(registry, "User"), _rest(registry)
        graph.add_node(user)
        graph.add_node(endpoint)
        graph.add_edge(Edge.data_flow(user.id, "entity", endpoint.id, "request"))
        graph.add_edge(Edge.data_flow(user.id, "entity", endpoint.id, "request"))
        assert graph.edge_count == 2
        assert graph.neighbors_out(user.id) == [endpoint.id]
        assert graph.neighbors_out(user.id, port="list") == []

    def test_has_cycle(self, graph, registry):
        a, b = _entity(registry, "A"), _entity(registry, "B")
        graph.add_node(a)
        graph.add_node(b)
        graph.add_edge(Edge.relationship(a.id, b.id, RelationType.ONE_TO_ONE))
        assert not graph.has_cycle()
        graph.add_edge(Edge.relationship(b.id, a.id, RelationType.ONE_TO_ONE))
        assert graph.has_cycle()


# ---------------------------------------------------------------------------
# Node edits
# ---------------------------------------------------------------------------


class TestNodeEdits:
    def test_add_and_remove_field(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        graph.add_field(user.id, Field(name="email", data_type=STRING))
        with pytest.raises(DuplicateIdError):
            graph.add_field(user.id, Field(name="email", data_type=STRING))
        assert graph.remove_field(user.id, "email").name == "email"

    def test_system_field_protected(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        with pytest.raises(SystemFieldError):
            graph.remove_field(user.id, "id")
        assert user.get_field("id") is not None

    def test_rename_rebinds_entity_ports(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        graph.rename_node(user.id, "Member")
        assert user.get_port("entity").data_type == entity("Member")
        assert user.get_port("list").data_type.entity_name() == "Member"

    def test_duplicate_node_gets_fresh_ids(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        copy_id = graph.duplicate_node(user.id)
        copy = graph.get_node(copy_id)
        assert copy_id != user.id
        assert copy.name == "User (copy)"
        assert {f.id for f in copy.fields}.isdisjoint({f.id for f in user.fields})
        assert copy.position.x == user.position.x + 20.0

    def test_set_config_and_move(self, graph, registry):
        endpoint = _rest(registry)
        graph.add_node(endpoint)
        graph.set_config(endpoint.id, "method", "DELETE")
        graph.move_node(endpoint.id, 10.0, 20.0)
        assert endpoint.get_config_str("method") == "DELETE"
        assert (endpoint.position.x, endpoint.position.y) == (10.0, 20.0)


# ---------------------------------------------------------------------------
# Groups, selection, events
# ---------------------------------------------------------------------------


class TestGroupsAndSelection:
    def test_group_unknown_node_rejected(self, graph):
        with pytest.raises(NotFoundError):
            graph.group([uuid4()])

    def test_ungroup(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        group_id = graph.group([user.id])
        assert graph.ungroup(group_id) == {user.id}
        assert graph.group_count == 0

    def test_select_ignores_unknown_ids(self, graph, registry):
        user = _entity(registry, "User")
        graph.add_node(user)
        graph.select([user.id, uuid4()])
        assert graph.selected_nodes == {user.id}
        graph.clear_selection()
        assert graph.selected_nodes == set()


class TestEvents:
    def test_mutations_publish_events(self, registry):
        bus = InMemoryEventBus()
        recorder = EventRecorder(bus)
        g = ProjectGraph(event_bus=bus)
        user, endpoint = _entity(registry, "User"), _rest(registry)
        g.add_node(user)
        g.add_node(endpoint)
        edge_id = g.add_edge(Edge.data_flow(user.id, "entity", endpoint.id, "request"))
        g.group([endpoint.id])
        g.rename_node(endpoint.id, "List Users")
        g.remove_node(user.id)

        assert len(recorder.of_type(NodeAdded)) == 2
        assert recorder.of_type(EdgeAdded)[0].edge_id == edge_id
        assert len(recorder.of_type(GroupCreated)) == 1
        assert recorder.of_type(NodeChanged)[0].change == "renamed"
        removed = recorder.of_type(NodeRemoved)[0]
        assert removed.node_id == user.id
        assert removed.removed_edges == (edge_id,)

    def test_failed_mutation_publishes_nothing(self, registry):
        bus = InMemoryEventBus()
        recorder = EventRecorder(bus)
        g = ProjectGraph(event_bus=bus)
        user = _entity(registry, "User")
        g.add_node(user)
        recorder.clear()

        with pytest.raises(SelfConnectionError):
            g.add_edge(Edge.relationship(user.id, user.id, RelationType.ONE_TO_ONE))
        assert recorder.events == []
