"""Pydantic models for flow definitions and their rendered layout.

A `Flow` is what the flow source (file, HTTP API) hands us. The `Layout*`
models are derived by `flowcanvas.visual.layout` on every layout pass and are
never mutated in place.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Orientation(str, Enum):
    """Which axis the level index maps to."""

    HORIZONTAL_LEVELS = "horizontal"  # level -> x, stacked along y
    VERTICAL_LEVELS = "vertical"  # level -> y, stacked along x


def _scalar_as_str(v: Any) -> Any:
    # YAML decodes `from: 1.5`, `id: 1` or an empty `from:` as non-strings.
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(v)
    return v


class InputBinding(BaseModel):
    """Binds a node parameter to a root input (`"input"`) or `"<node>.<output>"`."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    from_: str = Field(default="", alias="from")

    @field_validator("name", "from_", mode="before")
    @classmethod
    def _coerce_scalars(cls, v: Any) -> Any:
        return _scalar_as_str(v)


class OutputBinding(BaseModel):
    """A named node output; `to == "output"` marks a flow-level result."""

    name: str
    to: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, v: Any) -> Any:
        return _scalar_as_str(v)

    @field_validator("to", mode="before")
    @classmethod
    def _coerce_to(cls, v: Any) -> Any:
        return None if v is None else _scalar_as_str(v)


class FlowNode(BaseModel):
    """A single processing step of a flow."""

    id: str
    type: str = "llm"
    provider: Optional[str] = None
    model: Optional[str] = None
    prompt: Optional[str] = None
    inputs: List[InputBinding] = Field(default_factory=list)
    outputs: List[OutputBinding] = Field(default_factory=list)
    settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return _scalar_as_str(v)

    @field_validator("inputs", "outputs", mode="before")
    @classmethod
    def _none_as_empty_list(cls, v: Any) -> Any:
        # `inputs:` with no items decodes to None in YAML.
        return [] if v is None else v

    @field_validator("settings", mode="before")
    @classmethod
    def _none_as_empty_dict(cls, v: Any) -> Any:
        return {} if v is None else v


class FlowConfig(BaseModel):
    """Flow-wide defaults (opaque to layout)."""

    default_provider: Optional[str] = None
    default_model: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)


class Flow(BaseModel):
    """A complete flow definition."""

    name: str = ""
    version: str = ""
    description: str = ""
    config: FlowConfig = Field(default_factory=FlowConfig)
    nodes: List[FlowNode] = Field(default_factory=list)

    @field_validator("name", "version", mode="before")
    @classmethod
    def _coerce_scalars(cls, v: Any) -> Any:
        # `version: 1.0` is a float in YAML.
        return _scalar_as_str(v)

    @field_validator("config", mode="before")
    @classmethod
    def _none_as_default_config(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("nodes", mode="before")
    @classmethod
    def _none_as_no_nodes(cls, v: Any) -> Any:
        return [] if v is None else v

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None


class Position(BaseModel):
    """2D position on canvas (top-left corner of the node box)."""

    x: float
    y: float


class Dimensions(BaseModel):
    width: float
    height: float


class RegularLayoutNode(BaseModel):
    """A placed flow node."""

    kind: Literal["regular"] = "regular"
    id: str
    position: Position
    dimensions: Dimensions
    level: int
    flow_node: FlowNode


class StartLayoutNode(BaseModel):
    """Synthetic node standing for the flow's root inputs."""

    kind: Literal["start"] = "start"
    id: str = "start"
    label: str = "start"
    position: Position
    dimensions: Dimensions


class EndLayoutNode(BaseModel):
    """Synthetic node standing for the flow's terminal outputs."""

    kind: Literal["end"] = "end"
    id: str = "end"
    label: str = "end"
    position: Position
    dimensions: Dimensions


LayoutNode = Annotated[
    Union[RegularLayoutNode, StartLayoutNode, EndLayoutNode],
    Field(discriminator="kind"),
]


class LayoutEdge(BaseModel):
    """A directed edge between two layout nodes, labeled with the binding name."""

    id: str
    source: str
    target: str
    label: str


class LayoutGraph(BaseModel):
    """Output of one layout pass."""

    orientation: Orientation = Orientation.HORIZONTAL_LEVELS
    show_start_end_node: bool = True
    nodes: List[LayoutNode] = Field(default_factory=list)
    edges: List[LayoutEdge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[Union[RegularLayoutNode, StartLayoutNode, EndLayoutNode]]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None


class ExecuteFlowRequest(BaseModel):
    """Request to execute a flow with root-input values."""

    flow: Flow
    inputs: Dict[str, Any] = Field(default_factory=dict)


class NodeMetrics(BaseModel):
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    input_cost: Optional[float] = None
    output_cost: Optional[float] = None
    tokens_used: Optional[int] = None
    estimated_cost: Optional[float] = None
    duration: Optional[float] = None


class NodeResult(BaseModel):
    node_id: str
    success: Optional[bool] = None
    outputs: Optional[Dict[str, Any]] = None
    metrics: Optional[NodeMetrics] = None
    error: Optional[str] = None


class ExecutionResult(BaseModel):
    """Result of a flow execution as reported by the execution service."""

    success: bool
    error: Optional[str] = None
    flow_name: Optional[str] = None
    duration: float = 0
    outputs: Optional[Dict[str, Any]] = None
    node_results: Optional[List[NodeResult]] = None


class ValidateFlowResponse(BaseModel):
    valid: bool
    error: Optional[str] = None
    errors: List[str] = Field(default_factory=list)
    nodes: Optional[int] = None


class ProvidersResponse(BaseModel):
    providers: List[str] = Field(default_factory=list)


class UIConfig(BaseModel):
    """Client configuration read once per layout pass."""

    showStartEndNode: bool = False
