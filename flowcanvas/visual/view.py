"""State of one flow viewer session.

A viewer has three independent things that can go wrong, and presents them
separately:

- the flow itself (not loaded yet, or the flow source failed),
- the layout (the loaded flow cannot be laid out: cycle, duplicate ids),
- the last execution (pending, failed, succeeded).

A computed layout is never discarded because of an execution; it is replaced
wholesale only when the flow or the layout options change.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..errors import FlowLayoutError
from .layout import LayoutOptions, build_layout, root_input_names
from .models import ExecuteFlowRequest, ExecutionResult, Flow, FlowNode, LayoutGraph
from .selection import SelectionBridge

logger = logging.getLogger(__name__)


class FlowStatus(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class ExecutionStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FlowView:
    def __init__(
        self,
        options: Optional[LayoutOptions] = None,
        on_select: Optional[Callable[[Optional[FlowNode]], None]] = None,
    ):
        self.options = options or LayoutOptions()
        self.flow: Optional[Flow] = None
        self.flow_status = FlowStatus.NOT_LOADED
        self.load_error: Optional[str] = None

        self.graph: Optional[LayoutGraph] = None
        self.layout_error: Optional[FlowLayoutError] = None

        self.execution_status = ExecutionStatus.IDLE
        self.execution_result: Optional[ExecutionResult] = None
        self.execution_error: Optional[str] = None

        self.selected: Optional[FlowNode] = None
        self._on_select = on_select
        self._selection = SelectionBridge(self._set_selected)

    def _set_selected(self, node: Optional[FlowNode]) -> None:
        self.selected = node
        if self._on_select is not None:
            self._on_select(node)

    def _relayout(self) -> None:
        self.graph = None
        self.layout_error = None
        if self.flow is None:
            return
        try:
            self.graph = build_layout(self.flow, self.options)
        except FlowLayoutError as e:
            logger.warning(f"Layout failed for flow '{self.flow.name}': {e}")
            self.layout_error = e

    # Flow axis

    def load(self, flow: Flow) -> None:
        self.flow = flow
        self.flow_status = FlowStatus.LOADED
        self.load_error = None
        self.selected = None
        self._relayout()

    def load_failed(self, message: str) -> None:
        """Record a flow-source failure; a previously loaded flow stays visible."""
        self.load_error = message
        if self.flow is None:
            self.flow_status = FlowStatus.LOAD_FAILED

    def configure(self, options: LayoutOptions) -> None:
        if options == self.options:
            return
        self.options = options
        self._relayout()

    # Layout axis

    @property
    def renderable(self) -> bool:
        return self.graph is not None

    def required_inputs(self) -> List[str]:
        """Root-input names the execution form must ask for."""
        return root_input_names(self.flow) if self.flow is not None else []

    def select(self, node_ids: Iterable[str]) -> Optional[FlowNode]:
        if self.graph is None:
            return None
        return self._selection.handle_ids(self.graph, node_ids)

    # Execution axis

    def begin_execution(self, inputs: Optional[Dict[str, Any]] = None) -> ExecuteFlowRequest:
        if self.flow is None:
            raise RuntimeError("No flow loaded")
        if self.graph is None:
            raise RuntimeError(f"Flow cannot be laid out: {self.layout_error}")
        if self.execution_status is ExecutionStatus.PENDING:
            raise RuntimeError("An execution is already pending")
        self.execution_status = ExecutionStatus.PENDING
        self.execution_error = None
        return ExecuteFlowRequest(flow=self.flow, inputs=dict(inputs or {}))

    def finish_execution(self, result: ExecutionResult) -> None:
        self.execution_result = result
        if result.success:
            self.execution_status = ExecutionStatus.SUCCEEDED
            self.execution_error = None
        else:
            self.execution_status = ExecutionStatus.FAILED
            self.execution_error = result.error or "execution failed"

    def fail_execution(self, message: str) -> None:
        self.execution_status = ExecutionStatus.FAILED
        self.execution_error = message
