"""Best-effort validation of flow definitions.

`validate_flow` returns human-friendly error strings (empty when valid) so
hosts can show every problem at once; `ensure_valid` raises instead.
The layout pass itself only needs unique node ids and an acyclic graph; the
checks here go further (references, names, prompts).
"""

from __future__ import annotations

from typing import Dict, List, Set

from ..errors import CyclicFlowError, FlowValidationError
from .bindings import ROOT_INPUT
from .layout import assign_levels, build_dependency_graph
from .models import Flow, FlowNode


def _validate_node(node: FlowNode) -> List[str]:
    errors: List[str] = []
    prefix = f"node {node.id}"

    if not str(node.type or "").strip():
        errors.append(f"{prefix}: type: node type is required")
    if node.type == "llm" and not str(node.prompt or "").strip():
        errors.append(f"{prefix}: prompt: prompt is required for LLM nodes")

    output_names: Set[str] = set()
    for i, output in enumerate(node.outputs):
        if not output.name:
            errors.append(f"{prefix}: outputs[{i}].name: output name is required")
            continue
        if output.name in output_names:
            errors.append(f"{prefix}: outputs[{i}].name: duplicate output name: {output.name}")
        output_names.add(output.name)

    input_names: Set[str] = set()
    for i, binding in enumerate(node.inputs):
        if not binding.name:
            errors.append(f"{prefix}: inputs[{i}].name: input name is required")
        if not binding.from_:
            errors.append(f"{prefix}: inputs[{i}].from: input source is required")
        if binding.name and binding.name in input_names:
            errors.append(f"{prefix}: inputs[{i}].name: duplicate input name: {binding.name}")
        input_names.add(binding.name)

    return errors


def _validate_references(flow: Flow) -> List[str]:
    available: Dict[str, Set[str]] = {}
    for node in flow.nodes:
        available.setdefault(node.id, set()).update(o.name for o in node.outputs)

    errors: List[str] = []
    for node in flow.nodes:
        for binding in node.inputs:
            if not binding.from_ or binding.from_ == ROOT_INPUT:
                continue
            where = f"node {node.id}, input {binding.name}"
            parts = binding.from_.split(".")
            if len(parts) != 2 or not all(parts):
                errors.append(
                    f"{where}: invalid input reference format: {binding.from_} (expected 'nodeID.outputName')"
                )
                continue
            producer_id, output_name = parts
            if producer_id not in available:
                errors.append(f"{where}: referenced node does not exist: {producer_id}")
            elif output_name not in available[producer_id]:
                errors.append(f"{where}: referenced output does not exist: {producer_id}.{output_name}")
    return errors


def validate_flow(flow: Flow) -> List[str]:
    """Return a list of validation errors (empty when the flow is valid)."""
    errors: List[str] = []
    if not flow.name:
        errors.append("name: flow name is required")
    if not flow.version:
        errors.append("version: flow version is required")
    if not flow.nodes:
        errors.append("nodes: at least one node is required")
        return errors

    seen: Set[str] = set()
    for i, node in enumerate(flow.nodes):
        if not node.id:
            errors.append(f"nodes[{i}].id: node ID is required")
            continue
        if node.id in seen:
            errors.append(f"nodes[{i}].id: duplicate node ID: {node.id}")
        seen.add(node.id)
        errors.extend(_validate_node(node))

    try:
        assign_levels(flow, build_dependency_graph(flow))
    except CyclicFlowError as e:
        errors.append(f"nodes: cycle detected in flow graph involving node: {e.cycle[0]}")

    errors.extend(_validate_references(flow))
    return errors


def ensure_valid(flow: Flow) -> Flow:
    errors = validate_flow(flow)
    if errors:
        raise FlowValidationError(errors)
    return flow
