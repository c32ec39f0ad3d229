"""Full layout passes: boundary synthesis, ordering, ids and failures."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from flowcanvas.errors import CyclicFlowError, DuplicateEdgeIdError, DuplicateNodeIdError, FlowLayoutError
from flowcanvas.visual.layout import BOUNDARY_GAP, LayoutOptions, build_layout, root_input_names
from flowcanvas.visual.models import EndLayoutNode, Flow, Orientation, RegularLayoutNode, StartLayoutNode


WITH_BOUNDARIES = LayoutOptions(show_start_end_node=True)


def _flow(nodes: list) -> Flow:
    return Flow.model_validate({"name": "t", "version": "1", "nodes": nodes})


def _two_step_flow(**extra_b: Any) -> Flow:
    b: Dict[str, Any] = {"id": "B", "inputs": [{"name": "y", "from": "A.out"}]}
    b.update(extra_b)
    return _flow(
        [
            {"id": "A", "inputs": [{"name": "x", "from": "input"}], "outputs": [{"name": "out"}]},
            b,
        ]
    )


def test_two_step_flow_scenario() -> None:
    graph = build_layout(_two_step_flow(), WITH_BOUNDARIES)

    assert [n.id for n in graph.nodes] == ["start", "A", "B"]
    start, a, b = graph.nodes
    assert isinstance(start, StartLayoutNode)
    assert isinstance(a, RegularLayoutNode) and a.level == 0
    assert isinstance(b, RegularLayoutNode) and b.level == 1

    assert [(e.id, e.source, e.target, e.label) for e in graph.edges] == [
        ("start-A-x", "start", "A", "x"),
        ("A-B-y", "A", "B", "y"),
    ]
    assert not any(isinstance(n, EndLayoutNode) for n in graph.nodes)


def test_start_node_sits_before_level_zero_and_centered() -> None:
    graph = build_layout(_two_step_flow(), WITH_BOUNDARIES)
    start = graph.get_node("start")
    assert isinstance(start, StartLayoutNode)

    # Regular nodes span y 50..100; the start circle (72) is centered on 75.
    assert start.position.y == pytest.approx(75 - 36)
    assert start.position.x == pytest.approx(50 - BOUNDARY_GAP - 72)
    assert start.position.x + start.dimensions.width < 50


def test_end_node_sits_after_the_last_level() -> None:
    graph = build_layout(_two_step_flow(outputs=[{"name": "answer", "to": "output"}]), WITH_BOUNDARIES)
    assert [n.id for n in graph.nodes] == ["start", "end", "A", "B"]
    end = graph.get_node("end")
    assert isinstance(end, EndLayoutNode)
    assert end.position.x == 350 + 100 + BOUNDARY_GAP
    assert end.position.y == 75 - 35
    assert [e.id for e in graph.edges] == ["start-A-x", "B-answer-end", "A-B-y"]
    end_edge = graph.edges[1]
    assert (end_edge.source, end_edge.target, end_edge.label) == ("B", "end", "answer")


def test_vertical_boundaries_sit_above_and_below() -> None:
    flow = _two_step_flow(outputs=[{"name": "answer", "to": "output"}])
    graph = build_layout(flow, LayoutOptions(orientation=Orientation.VERTICAL_LEVELS, show_start_end_node=True))
    start, end = graph.get_node("start"), graph.get_node("end")
    assert start is not None and end is not None
    # Levels at y=50 and y=200, nodes 50 high; both nodes span x 50..150.
    assert start.position.y + start.dimensions.height < 50
    assert end.position.y == 250 + BOUNDARY_GAP
    assert start.position.x == pytest.approx(100 - 36)
    assert end.position.x == pytest.approx(100 - 35)


def test_no_root_bindings_means_no_start_node() -> None:
    flow = _flow([{"id": "A"}, {"id": "B", "inputs": [{"name": "y", "from": "A.out"}]}])
    graph = build_layout(flow, WITH_BOUNDARIES)
    assert [n.kind for n in graph.nodes] == ["regular", "regular"]
    assert [e.id for e in graph.edges] == ["A-B-y"]


def test_end_without_start() -> None:
    flow = _flow([{"id": "A", "outputs": [{"name": "o", "to": "output"}]}])
    graph = build_layout(flow, WITH_BOUNDARIES)
    assert [n.kind for n in graph.nodes] == ["end", "regular"]
    assert [e.id for e in graph.edges] == ["A-o-end"]


def test_boundaries_disabled_omits_nodes_and_edges() -> None:
    graph = build_layout(_two_step_flow(outputs=[{"name": "answer", "to": "output"}]))
    assert [n.id for n in graph.nodes] == ["A", "B"]
    assert [e.id for e in graph.edges] == ["A-B-y"]
    assert graph.show_start_end_node is False


def test_edge_from_binding_spec_example() -> None:
    flow = _flow([{"id": "a"}, {"id": "consumer", "inputs": [{"name": "x", "from": "a.out1"}]}])
    graph = build_layout(flow)
    assert len(graph.edges) == 1
    edge = graph.edges[0]
    assert (edge.id, edge.source, edge.target, edge.label) == ("a-consumer-x", "a", "consumer", "x")


def test_malformed_binding_yields_no_edge() -> None:
    flow = _flow([{"id": "a"}, {"id": "b", "inputs": [{"name": "x", "from": "badformat"}]}])
    graph = build_layout(flow, WITH_BOUNDARIES)
    assert graph.edges == []
    assert {n.id: n.level for n in graph.nodes if isinstance(n, RegularLayoutNode)} == {"a": 0, "b": 0}


def test_regular_nodes_follow_packed_level_order() -> None:
    flow = _flow(
        [
            {"id": "late", "inputs": [{"name": "i", "from": "first.out"}]},
            {"id": "first"},
            {"id": "second"},
        ]
    )
    graph = build_layout(flow)
    assert [n.id for n in graph.nodes] == ["first", "second", "late"]


def test_regular_nodes_reference_their_flow_node() -> None:
    flow = _two_step_flow()
    graph = build_layout(flow)
    a = graph.get_node("A")
    assert isinstance(a, RegularLayoutNode)
    assert a.flow_node.id == "A"
    assert a.flow_node.inputs[0].from_ == "input"


def test_layout_is_idempotent() -> None:
    flow = _two_step_flow(outputs=[{"name": "answer", "to": "output"}])
    first = build_layout(flow, WITH_BOUNDARIES)
    second = build_layout(flow, WITH_BOUNDARIES)
    assert first.model_dump_json() == second.model_dump_json()


def test_duplicate_node_ids_fail_before_layout() -> None:
    flow = _flow([{"id": "A"}, {"id": "A"}])
    with pytest.raises(DuplicateNodeIdError) as exc:
        build_layout(flow)
    assert exc.value.node_id == "A"


def test_duplicate_edge_ids_are_rejected() -> None:
    flow = _flow(
        [
            {"id": "A"},
            {"id": "C", "inputs": [{"name": "x", "from": "A.o1"}, {"name": "x", "from": "A.o2"}]},
        ]
    )
    with pytest.raises(DuplicateEdgeIdError) as exc:
        build_layout(flow)
    assert exc.value.edge_id == "A-C-x"


def test_hyphenated_ids_that_collide_are_rejected() -> None:
    flow = _flow(
        [
            {"id": "a-b"},
            {"id": "a"},
            {"id": "c", "inputs": [{"name": "d", "from": "a-b.out"}]},
            {"id": "b-c", "inputs": [{"name": "d", "from": "a.out"}]},
        ]
    )
    with pytest.raises(DuplicateEdgeIdError):
        build_layout(flow)


def test_flow_node_named_like_a_boundary_node() -> None:
    flow = _flow([{"id": "start", "inputs": [{"name": "q", "from": "input"}]}])
    assert [n.id for n in build_layout(flow).nodes] == ["start"]
    with pytest.raises(DuplicateNodeIdError):
        build_layout(flow, WITH_BOUNDARIES)


def test_cyclic_flow_is_a_layout_failure() -> None:
    flow = _flow(
        [
            {"id": "A", "inputs": [{"name": "x", "from": "B.out"}]},
            {"id": "B", "inputs": [{"name": "y", "from": "A.out"}]},
        ]
    )
    with pytest.raises(FlowLayoutError) as exc:
        build_layout(flow, WITH_BOUNDARIES)
    assert isinstance(exc.value, CyclicFlowError)


def test_root_input_names_are_deduplicated_in_order() -> None:
    flow = _flow(
        [
            {"id": "A", "inputs": [{"name": "question", "from": "input"}, {"name": "ctx", "from": "input"}]},
            {"id": "B", "inputs": [{"name": "question", "from": "input"}, {"name": "a", "from": "A.out"}]},
        ]
    )
    assert root_input_names(flow) == ["question", "ctx"]
