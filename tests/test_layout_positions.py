"""Node sizing and level packing."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from flowcanvas.visual.layout import (
    LayoutOptions,
    boundary_dimensions,
    build_layout,
    node_dimensions,
    pack_positions,
)
from flowcanvas.visual.models import Dimensions, Flow, Orientation, RegularLayoutNode


def _flow(nodes: list) -> Flow:
    return Flow.model_validate({"name": "t", "version": "1", "nodes": nodes})


def _node(node_id: str, *sources: str) -> Dict[str, Any]:
    return {"id": node_id, "inputs": [{"name": f"in{i}", "from": s} for i, s in enumerate(sources)]}


def test_regular_node_width_has_a_floor_and_fixed_height() -> None:
    assert node_dimensions("a") == Dimensions(width=100, height=50)
    # 18 chars * 9 + 2 * 16 padding
    assert node_dimensions("summarize_document") == Dimensions(width=194, height=50)


def test_boundary_nodes_are_circles_with_extra_room_for_text() -> None:
    start = boundary_dimensions("start")
    assert start.width == start.height == pytest.approx(72.0)
    end = boundary_dimensions("end")
    assert end.width == end.height == 70


def test_three_independent_nodes_stack_in_one_column() -> None:
    flow = _flow([_node("n1"), _node("n2"), _node("summarize_document")])
    graph = build_layout(flow)
    pos = {n.id: (n.position.x, n.position.y) for n in graph.nodes}
    assert pos == {"n1": (50, 50), "n2": (50, 130), "summarize_document": (50, 210)}
    assert all(isinstance(n, RegularLayoutNode) and n.level == 0 for n in graph.nodes)


def test_vertical_levels_stack_by_width_along_x() -> None:
    flow = _flow([_node("n1"), _node("summarize_document"), _node("n3"), _node("child", "n1.out")])
    graph = build_layout(flow, LayoutOptions(orientation=Orientation.VERTICAL_LEVELS))
    pos = {n.id: (n.position.x, n.position.y) for n in graph.nodes}
    assert pos["n1"] == (50, 50)
    assert pos["summarize_document"] == (200, 50)  # 50 + 100 + 50
    assert pos["n3"] == (444, 50)  # 200 + 194 + 50
    assert pos["child"] == (50, 200)  # level 1: 1 * 150 + 50


def test_horizontal_levels_map_level_to_x() -> None:
    flow = _flow([_node("a"), _node("b", "a.out"), _node("c", "b.out"), _node("d", "a.out")])
    graph = build_layout(flow)
    pos = {n.id: (n.position.x, n.position.y) for n in graph.nodes}
    assert pos == {"a": (50, 50), "b": (350, 50), "d": (350, 130), "c": (650, 50)}


@pytest.mark.parametrize("orientation", list(Orientation))
def test_nodes_in_a_level_never_overlap(orientation: Orientation) -> None:
    ids = ["a", "bb", "a_rather_long_node_identifier", "c", "dd", "final_aggregation_step"]
    nodes = [_node(ids[0]), _node(ids[1])] + [_node(i, "a.out") for i in ids[2:]]
    graph = build_layout(_flow(nodes), LayoutOptions(orientation=orientation))

    by_level: Dict[int, list] = {}
    for n in graph.nodes:
        by_level.setdefault(n.level, []).append(n)

    for members in by_level.values():
        if orientation is Orientation.HORIZONTAL_LEVELS:
            spans = [(n.position.y, n.position.y + n.dimensions.height) for n in members]
        else:
            spans = [(n.position.x, n.position.x + n.dimensions.width) for n in members]
        spans.sort()
        for (_, prev_end), (next_start, _) in zip(spans, spans[1:]):
            assert next_start > prev_end


def test_pack_positions_uses_given_dimensions() -> None:
    dims = {"a": Dimensions(width=120, height=80), "b": Dimensions(width=100, height=50)}
    positions = pack_positions([["a", "b"]], dims, Orientation.HORIZONTAL_LEVELS)
    assert (positions["b"].x, positions["b"].y) == (50, 160)  # 50 + 80 + 30
