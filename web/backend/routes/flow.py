"""Flow retrieval, validation, layout and execution routes.

Failures are kept on separate axes so clients can present them separately:
- no flow / flow source failure: 404 / 500 with `detail.kind == "flow"`
- layout failure: 422 with `detail.kind == "layout"`
- execution failure: 200 with an `ExecutionResult` whose `success` is false
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from flowcanvas.errors import FlowLayoutError, FlowParseError
from flowcanvas.visual.layout import LayoutOptions, build_layout, root_input_names
from flowcanvas.visual.parser import load_flow, parse_flow_bytes
from flowcanvas.visual.render import to_render_payload
from flowcanvas.visual.validator import validate_flow

from ..models import (
    ExecuteFlowRequest,
    ExecutionResult,
    Flow,
    Orientation,
    ValidateFlowResponse,
)
from ..services.executor import execute_flow_remote
from ..services.settings import load_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/flow", tags=["flow"])


def _filename_for(request: Request) -> str:
    content_type = str(request.headers.get("content-type") or "").lower()
    return "flow.json" if "json" in content_type else "flow.yaml"


def _load_configured_flow() -> Flow:
    settings = load_settings()
    if settings.flow_path is None:
        raise HTTPException(status_code=404, detail={"kind": "flow", "error": "No flow file specified"})
    try:
        return load_flow(settings.flow_path)
    except FlowParseError as e:
        logger.warning(f"Failed to load flow from {settings.flow_path}: {e}")
        raise HTTPException(status_code=500, detail={"kind": "flow", "error": f"Failed to load flow: {e}"})


def _layout_payload(flow: Flow, orientation: Orientation, show_start_end_node: Optional[bool]) -> Dict[str, Any]:
    show = load_settings().show_start_end_node if show_start_end_node is None else show_start_end_node
    try:
        graph = build_layout(flow, LayoutOptions(orientation=orientation, show_start_end_node=show))
    except FlowLayoutError as e:
        raise HTTPException(status_code=422, detail={"kind": "layout", "error": str(e)})
    return {
        "orientation": graph.orientation.value,
        "showStartEndNode": graph.show_start_end_node,
        "requiredInputs": root_input_names(flow),
        **to_render_payload(graph),
    }


@router.get("", response_model=Flow, response_model_by_alias=True)
def get_flow():
    """Return the flow definition the server was started with."""
    return _load_configured_flow()


@router.post("", response_model=Flow, response_model_by_alias=True)
async def parse_flow(request: Request):
    """Parse a flow definition (YAML or JSON) sent as the request body."""
    body = await request.body()
    try:
        return parse_flow_bytes(body, _filename_for(request))
    except FlowParseError as e:
        raise HTTPException(status_code=400, detail={"kind": "flow", "error": f"Failed to parse flow: {e}"})


@router.post("/validate", response_model=ValidateFlowResponse)
async def validate(request: Request):
    """Validate a flow definition sent as the request body."""
    body = await request.body()
    try:
        flow = parse_flow_bytes(body, _filename_for(request))
    except FlowParseError as e:
        return ValidateFlowResponse(valid=False, error=f"Parse error: {e}")

    errors = validate_flow(flow)
    if errors:
        return ValidateFlowResponse(valid=False, error=f"Validation error: {errors[0]}", errors=errors)
    return ValidateFlowResponse(valid=True, nodes=len(flow.nodes))


@router.get("/layout")
def get_layout(
    orientation: Orientation = Query(Orientation.HORIZONTAL_LEVELS),
    show_start_end_node: Optional[bool] = Query(None, alias="showStartEndNode"),
) -> Dict[str, Any]:
    """Lay out the configured flow for the rendering widget."""
    return _layout_payload(_load_configured_flow(), orientation, show_start_end_node)


@router.post("/layout")
def layout_flow(
    flow: Flow,
    orientation: Orientation = Query(Orientation.HORIZONTAL_LEVELS),
    show_start_end_node: Optional[bool] = Query(None, alias="showStartEndNode"),
) -> Dict[str, Any]:
    """Lay out a flow sent as JSON."""
    return _layout_payload(flow, orientation, show_start_end_node)


@router.post("/execute", response_model=ExecutionResult)
def execute(request: ExecuteFlowRequest):
    """Forward a flow and its root inputs to the execution service."""
    settings = load_settings()
    result = execute_flow_remote(
        request,
        executor_url=settings.executor_url,
        token=settings.executor_token,
        timeout_s=settings.executor_timeout_s,
    )
    if not result.success:
        logger.info(f"Execution of flow '{request.flow.name}' failed: {result.error}")
    return result
