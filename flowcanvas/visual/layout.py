"""Level-based layout of a flow as a renderable graph.

One layout pass turns a `Flow` into a `LayoutGraph`:

1. dependencies: node id -> producer node ids, from `<node>.<output>` bindings
2. levels: longest dependency chain per node (0 for nodes without producers)
3. dimensions: node box size from its id length
4. positions: one column (or row) per level, nodes stacked inside a level
5. boundaries: synthetic `start` / `end` nodes for root inputs and terminal outputs

The pass is pure: no I/O, no shared state, and the same flow with the same
options always yields the same nodes, edges and ordering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import CyclicFlowError, DuplicateEdgeIdError, DuplicateNodeIdError
from .bindings import BindingKind, is_terminal_output, resolve_input_binding
from .models import (
    Dimensions,
    EndLayoutNode,
    Flow,
    LayoutEdge,
    LayoutGraph,
    Orientation,
    Position,
    RegularLayoutNode,
    StartLayoutNode,
)

logger = logging.getLogger(__name__)


START_NODE_ID = "start"
END_NODE_ID = "end"

MARGIN = 50.0
BOUNDARY_GAP = 80.0

CHAR_WIDTH = 9
NODE_PADDING = 16  # per side
MIN_NODE_WIDTH = 100
NODE_HEIGHT = 50
MIN_BOUNDARY_DIAMETER = 70
BOUNDARY_TEXT_FACTOR = 1.6


@dataclass(frozen=True)
class AxisRules:
    level_spacing: float
    node_gap: float


AXIS_RULES: Dict[Orientation, AxisRules] = {
    Orientation.HORIZONTAL_LEVELS: AxisRules(level_spacing=300.0, node_gap=30.0),
    Orientation.VERTICAL_LEVELS: AxisRules(level_spacing=150.0, node_gap=50.0),
}


@dataclass(frozen=True)
class LayoutOptions:
    orientation: Orientation = Orientation.HORIZONTAL_LEVELS
    show_start_end_node: bool = False


class VisitState(Enum):
    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"


BoundaryNode = Union[StartLayoutNode, EndLayoutNode]


def _ensure_unique_node_ids(flow: Flow) -> None:
    seen: set[str] = set()
    for node_id in flow.node_ids():
        if node_id in seen:
            raise DuplicateNodeIdError(node_id)
        seen.add(node_id)


def build_dependency_graph(flow: Flow) -> Dict[str, List[str]]:
    """Return {node_id -> [producer node ids]} in flow order.

    References to ids that are not nodes of this flow are dropped, so every
    producer is itself a key of the result.
    """
    known = set(flow.node_ids())
    deps: Dict[str, List[str]] = {}
    for node in flow.nodes:
        producers = deps.setdefault(node.id, [])
        for binding in node.inputs:
            resolved = resolve_input_binding(binding)
            if resolved.kind is not BindingKind.NODE:
                continue
            if resolved.producer_id not in known:
                logger.debug(
                    f"Ignoring binding '{binding.name}' of node '{node.id}': "
                    f"unknown producer '{resolved.producer_id}'"
                )
                continue
            producers.append(str(resolved.producer_id))
    return deps


def _evaluate_level(
    root: str,
    deps: Dict[str, List[str]],
    state: Dict[str, VisitState],
    levels: Dict[str, int],
) -> None:
    """Depth-first level evaluation from `root`, using an explicit stack."""
    if state.get(root) is VisitState.DONE:
        return

    state[root] = VisitState.IN_PROGRESS
    stack: List[Tuple[str, Iterator[str]]] = [(root, iter(deps.get(root, ())))]
    while stack:
        node_id, pending = stack[-1]
        descended = False
        for dep in pending:
            dep_state = state.get(dep, VisitState.UNVISITED)
            if dep_state is VisitState.DONE:
                continue
            if dep_state is VisitState.IN_PROGRESS:
                chain = [frame[0] for frame in stack]
                raise CyclicFlowError(chain[chain.index(dep):] + [dep])
            state[dep] = VisitState.IN_PROGRESS
            stack.append((dep, iter(deps.get(dep, ()))))
            descended = True
            break
        if descended:
            continue

        stack.pop()
        producers = deps.get(node_id, ())
        levels[node_id] = 1 + max(levels[d] for d in producers) if producers else 0
        state[node_id] = VisitState.DONE


def assign_levels(flow: Flow, dependencies: Optional[Dict[str, List[str]]] = None) -> Dict[str, int]:
    """Return {node_id -> level}; raises CyclicFlowError on a dependency cycle."""
    deps = dependencies if dependencies is not None else build_dependency_graph(flow)
    state: Dict[str, VisitState] = {node_id: VisitState.UNVISITED for node_id in deps}
    levels: Dict[str, int] = {}
    for node_id in flow.node_ids():
        _evaluate_level(node_id, deps, state, levels)
    return levels


def group_by_level(flow: Flow, levels: Dict[str, int]) -> List[List[str]]:
    """Return node ids per level (index = level), each list in flow order."""
    grouped: List[List[str]] = [[] for _ in range(max(levels.values(), default=-1) + 1)]
    for node_id in flow.node_ids():
        grouped[levels[node_id]].append(node_id)
    return grouped


def node_dimensions(label: str) -> Dimensions:
    width = max(MIN_NODE_WIDTH, len(label) * CHAR_WIDTH + 2 * NODE_PADDING)
    return Dimensions(width=width, height=NODE_HEIGHT)


def boundary_dimensions(label: str) -> Dimensions:
    """Circle diameter; text is given extra room since it sits inside a circle."""
    diameter = max(MIN_BOUNDARY_DIAMETER, len(label) * CHAR_WIDTH * BOUNDARY_TEXT_FACTOR)
    return Dimensions(width=diameter, height=diameter)


def _place(primary: float, secondary: float, orientation: Orientation) -> Position:
    if orientation is Orientation.HORIZONTAL_LEVELS:
        return Position(x=primary, y=secondary)
    return Position(x=secondary, y=primary)


def _primary(position: Position, orientation: Orientation) -> float:
    return position.x if orientation is Orientation.HORIZONTAL_LEVELS else position.y


def _secondary(position: Position, orientation: Orientation) -> float:
    return position.y if orientation is Orientation.HORIZONTAL_LEVELS else position.x


def _primary_extent(dimensions: Dimensions, orientation: Orientation) -> float:
    return dimensions.width if orientation is Orientation.HORIZONTAL_LEVELS else dimensions.height


def _secondary_extent(dimensions: Dimensions, orientation: Orientation) -> float:
    return dimensions.height if orientation is Orientation.HORIZONTAL_LEVELS else dimensions.width


def pack_positions(
    grouped: Sequence[Sequence[str]],
    dimensions: Dict[str, Dimensions],
    orientation: Orientation,
) -> Dict[str, Position]:
    """Place each level on the primary axis and stack its nodes on the secondary axis."""
    rules = AXIS_RULES[orientation]
    positions: Dict[str, Position] = {}
    for level, node_ids in enumerate(grouped):
        primary = level * rules.level_spacing + MARGIN
        secondary = MARGIN
        for node_id in node_ids:
            dims = dimensions[node_id]
            if _primary_extent(dims, orientation) >= rules.level_spacing:
                logger.warning(
                    f"Node '{node_id}' is wider than the level spacing "
                    f"({_primary_extent(dims, orientation)} >= {rules.level_spacing}); it may overlap the next level"
                )
            positions[node_id] = _place(primary, secondary, orientation)
            secondary += _secondary_extent(dims, orientation) + rules.node_gap
    return positions


def root_bindings(flow: Flow) -> List[Tuple[str, str]]:
    """Return [(consumer node id, binding name)] for every `from: input` binding."""
    out: List[Tuple[str, str]] = []
    for node in flow.nodes:
        for binding in node.inputs:
            if resolve_input_binding(binding).kind is BindingKind.ROOT:
                out.append((node.id, binding.name))
    return out


def terminal_outputs(flow: Flow) -> List[Tuple[str, str]]:
    """Return [(producer node id, output name)] for every `to: output` output."""
    return [(node.id, out.name) for node in flow.nodes for out in node.outputs if is_terminal_output(out)]


def root_input_names(flow: Flow) -> List[str]:
    """Names of the root inputs a caller has to supply, first occurrence first."""
    return list(dict.fromkeys(name for _, name in root_bindings(flow)))


def synthesize_boundaries(
    flow: Flow,
    positions: Dict[str, Position],
    dimensions: Dict[str, Dimensions],
    orientation: Orientation,
) -> Tuple[List[BoundaryNode], List[LayoutEdge]]:
    """Build `start` / `end` nodes and their edges around the regular layout.

    `start` exists only if some input reads `from: input`; `end` only if some
    output is declared `to: output`. Both are centered on the secondary axis of
    the regular nodes' bounding box and sit BOUNDARY_GAP outside its primary extent.
    """
    inputs = root_bindings(flow)
    outputs = terminal_outputs(flow)
    if not positions or (not inputs and not outputs):
        return [], []

    primary_min = min(_primary(p, orientation) for p in positions.values())
    primary_max = max(
        _primary(positions[nid], orientation) + _primary_extent(dimensions[nid], orientation) for nid in positions
    )
    secondary_min = min(_secondary(p, orientation) for p in positions.values())
    secondary_max = max(
        _secondary(positions[nid], orientation) + _secondary_extent(dimensions[nid], orientation) for nid in positions
    )
    center = (secondary_min + secondary_max) / 2

    nodes: List[BoundaryNode] = []
    edges: List[LayoutEdge] = []

    if inputs:
        dims = boundary_dimensions(START_NODE_ID)
        primary = primary_min - BOUNDARY_GAP - _primary_extent(dims, orientation)
        position = _place(primary, center - _secondary_extent(dims, orientation) / 2, orientation)
        nodes.append(StartLayoutNode(id=START_NODE_ID, label=START_NODE_ID, position=position, dimensions=dims))
        for consumer_id, name in inputs:
            edges.append(
                LayoutEdge(id=f"start-{consumer_id}-{name}", source=START_NODE_ID, target=consumer_id, label=name)
            )

    if outputs:
        dims = boundary_dimensions(END_NODE_ID)
        primary = primary_max + BOUNDARY_GAP
        position = _place(primary, center - _secondary_extent(dims, orientation) / 2, orientation)
        nodes.append(EndLayoutNode(id=END_NODE_ID, label=END_NODE_ID, position=position, dimensions=dims))
        for producer_id, name in outputs:
            edges.append(LayoutEdge(id=f"{producer_id}-{name}-end", source=producer_id, target=END_NODE_ID, label=name))

    return nodes, edges


def _node_edges(flow: Flow, dependencies: Dict[str, List[str]]) -> List[LayoutEdge]:
    edges: List[LayoutEdge] = []
    for node in flow.nodes:
        for binding in node.inputs:
            resolved = resolve_input_binding(binding)
            if resolved.kind is not BindingKind.NODE or resolved.producer_id not in dependencies:
                continue
            edges.append(
                LayoutEdge(
                    id=f"{resolved.producer_id}-{node.id}-{binding.name}",
                    source=str(resolved.producer_id),
                    target=node.id,
                    label=binding.name,
                )
            )
    return edges


def build_layout(flow: Flow, options: Optional[LayoutOptions] = None) -> LayoutGraph:
    """Run a full layout pass.

    Raises:
        DuplicateNodeIdError: two flow nodes share an id, or a flow node uses a
            boundary node id while boundary nodes are shown.
        CyclicFlowError: node-to-node bindings form a cycle.
        DuplicateEdgeIdError: two bindings derive the same edge id.
    """
    opts = options or LayoutOptions()
    orientation = opts.orientation
    _ensure_unique_node_ids(flow)

    deps = build_dependency_graph(flow)
    levels = assign_levels(flow, deps)
    grouped = group_by_level(flow, levels)
    dimensions = {node.id: node_dimensions(node.id) for node in flow.nodes}
    positions = pack_positions(grouped, dimensions, orientation)

    by_id = {node.id: node for node in flow.nodes}
    regular = [
        RegularLayoutNode(
            id=node_id,
            position=positions[node_id],
            dimensions=dimensions[node_id],
            level=level,
            flow_node=by_id[node_id],
        )
        for level, node_ids in enumerate(grouped)
        for node_id in node_ids
    ]

    boundary_nodes: List[BoundaryNode] = []
    boundary_edges: List[LayoutEdge] = []
    if opts.show_start_end_node:
        boundary_nodes, boundary_edges = synthesize_boundaries(flow, positions, dimensions, orientation)
        for b in boundary_nodes:
            if b.id in dimensions:
                raise DuplicateNodeIdError(b.id, reason="flow node id collides with boundary node")

    edges = boundary_edges + _node_edges(flow, deps)
    seen: set[str] = set()
    for edge in edges:
        if edge.id in seen:
            raise DuplicateEdgeIdError(edge.id)
        seen.add(edge.id)

    logger.debug(
        f"Laid out flow '{flow.name}': {len(regular)} nodes on {len(grouped)} levels, "
        f"{len(boundary_nodes)} boundary nodes, {len(edges)} edges"
    )
    return LayoutGraph(
        orientation=orientation,
        show_start_end_node=opts.show_start_end_node,
        nodes=[*boundary_nodes, *regular],
        edges=edges,
    )
