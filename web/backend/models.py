"""Web backend models.

The web backend re-exports the portable flow models from
`flowcanvas.visual.models` so other hosts (CLI, scripts) can reuse the same
JSON schema without importing the backend package.
"""

from __future__ import annotations

from flowcanvas.visual.models import (  # noqa: F401
    ExecuteFlowRequest,
    ExecutionResult,
    Flow,
    FlowConfig,
    FlowNode,
    InputBinding,
    NodeMetrics,
    NodeResult,
    Orientation,
    OutputBinding,
    ProvidersResponse,
    UIConfig,
    ValidateFlowResponse,
)
