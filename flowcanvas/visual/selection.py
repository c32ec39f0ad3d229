"""Map rendering-widget selections back to flow nodes."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence, Union

from .models import EndLayoutNode, FlowNode, LayoutGraph, RegularLayoutNode, StartLayoutNode


AnyLayoutNode = Union[RegularLayoutNode, StartLayoutNode, EndLayoutNode]


def selected_flow_node(selection: Sequence[AnyLayoutNode]) -> Optional[FlowNode]:
    """Return the flow node behind the first selected layout node, if any.

    Boundary nodes and empty selections select nothing. Multi-selection is not
    an interaction we support; only the first element counts.
    """
    if not selection:
        return None
    first = selection[0]
    if isinstance(first, RegularLayoutNode):
        return first.flow_node
    if isinstance(first, (StartLayoutNode, EndLayoutNode)):
        return None
    raise TypeError(f"Unsupported layout node: {type(first).__name__}")


class SelectionBridge:
    """Forward widget selection events as "selected flow node or None"."""

    def __init__(self, on_select: Callable[[Optional[FlowNode]], None]):
        self._on_select = on_select

    def handle(self, selection: Sequence[AnyLayoutNode]) -> Optional[FlowNode]:
        node = selected_flow_node(selection)
        self._on_select(node)
        return node

    def handle_ids(self, graph: LayoutGraph, node_ids: Iterable[str]) -> Optional[FlowNode]:
        """Same as `handle`, for widgets that report selected node ids.

        Ids that are not part of `graph` are skipped.
        """
        selection = [n for n in (graph.get_node(i) for i in node_ids) if n is not None]
        return self.handle(selection)
