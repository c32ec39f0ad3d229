"""Widget-facing records for a LayoutGraph.

The rendering widget (pan/zoom/drag canvas) consumes plain node and edge
dicts; this is the only place that knows their shape.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .models import EndLayoutNode, LayoutGraph, Orientation, RegularLayoutNode, StartLayoutNode


_HANDLE_SIDES = {
    # orientation -> (targetPosition, sourcePosition)
    Orientation.HORIZONTAL_LEVELS: ("left", "right"),
    Orientation.VERTICAL_LEVELS: ("top", "bottom"),
}


def _node_record(node: Any, graph: LayoutGraph, incoming: set[str], outgoing: set[str]) -> Dict[str, Any]:
    target_side, source_side = _HANDLE_SIDES[graph.orientation]
    record: Dict[str, Any] = {
        "id": node.id,
        "position": {"x": node.position.x, "y": node.position.y},
        "style": {"width": node.dimensions.width, "height": node.dimensions.height},
        "sourcePosition": source_side,
        "targetPosition": target_side,
    }

    if isinstance(node, RegularLayoutNode):
        if graph.show_start_end_node:
            show_in, show_out = node.id in incoming, node.id in outgoing
        else:
            show_in = show_out = True
        record["type"] = "default"
        record["data"] = {
            "label": node.id,
            "nodeType": node.flow_node.type,
            "level": node.level,
            "showInputHandle": show_in,
            "showOutputHandle": show_out,
        }
    elif isinstance(node, StartLayoutNode):
        record["type"] = "circle"
        record["data"] = {"label": node.label, "isStart": True, "isEnd": False}
    elif isinstance(node, EndLayoutNode):
        record["type"] = "circle"
        record["data"] = {"label": node.label, "isStart": False, "isEnd": True}
    else:
        raise TypeError(f"Unsupported layout node: {type(node).__name__}")
    return record


def to_render_payload(graph: LayoutGraph) -> Dict[str, List[Dict[str, Any]]]:
    incoming = {e.target for e in graph.edges}
    outgoing = {e.source for e in graph.edges}
    boundary_ids = {n.id for n in graph.nodes if not isinstance(n, RegularLayoutNode)}

    nodes = [_node_record(n, graph, incoming, outgoing) for n in graph.nodes]
    edges = [
        {
            "id": e.id,
            "source": e.source,
            "target": e.target,
            "label": e.label,
            "animated": e.source not in boundary_ids and e.target not in boundary_ids,
        }
        for e in graph.edges
    ]
    return {"nodes": nodes, "edges": edges}
