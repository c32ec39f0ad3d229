"""Error types raised by flowcanvas.

Malformed bindings are not errors: they resolve to "unresolved" and are
ignored by the layout. Everything below is a real failure of one of the three
independent axes a host has to present separately (flow source, layout,
execution; execution failures are reported as results, not exceptions).
"""

from __future__ import annotations

from typing import List, Sequence


class FlowcanvasError(Exception):
    """Base class for flowcanvas errors."""


class FlowParseError(FlowcanvasError, ValueError):
    """A flow file or payload could not be decoded."""


class FlowValidationError(FlowcanvasError, ValueError):
    """A flow failed validation; `errors` holds one message per problem."""

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "invalid flow")


class FlowLayoutError(FlowcanvasError, ValueError):
    """The layout pass could not produce a graph for this flow."""


class CyclicFlowError(FlowLayoutError):
    def __init__(self, cycle: Sequence[str]):
        self.cycle: List[str] = list(cycle)
        super().__init__(f"cyclic flow: {' -> '.join(self.cycle)}")


class DuplicateNodeIdError(FlowLayoutError):
    def __init__(self, node_id: str, reason: str = "duplicate node id"):
        self.node_id = node_id
        super().__init__(f"{reason}: {node_id}")


class DuplicateEdgeIdError(FlowLayoutError):
    def __init__(self, edge_id: str):
        self.edge_id = edge_id
        super().__init__(f"duplicate edge id: {edge_id}")
