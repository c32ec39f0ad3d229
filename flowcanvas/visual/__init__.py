"""Flow definitions, layout and viewer state."""

from .layout import LayoutOptions, build_layout, root_input_names
from .models import (
    EndLayoutNode,
    Flow,
    FlowNode,
    InputBinding,
    LayoutEdge,
    LayoutGraph,
    Orientation,
    OutputBinding,
    RegularLayoutNode,
    StartLayoutNode,
)
from .parser import load_flow, parse_flow_bytes, save_flow
from .render import to_render_payload
from .selection import SelectionBridge, selected_flow_node
from .validator import ensure_valid, validate_flow
from .view import ExecutionStatus, FlowStatus, FlowView

__all__ = [
    "EndLayoutNode",
    "ExecutionStatus",
    "Flow",
    "FlowNode",
    "FlowStatus",
    "FlowView",
    "InputBinding",
    "LayoutEdge",
    "LayoutGraph",
    "LayoutOptions",
    "Orientation",
    "OutputBinding",
    "RegularLayoutNode",
    "SelectionBridge",
    "StartLayoutNode",
    "build_layout",
    "ensure_valid",
    "load_flow",
    "parse_flow_bytes",
    "root_input_names",
    "save_flow",
    "selected_flow_node",
    "to_render_payload",
    "validate_flow",
]
