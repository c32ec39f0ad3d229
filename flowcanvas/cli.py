"""Command-line interface for flowcanvas.

Commands:
- init: write a starter flow definition
- validate: check a flow definition file
- layout: print the computed layout (JSON)
- test: run a flow on the execution service and print the result
- version: print the version
- serve: run the web viewer backend (FastAPI)
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .errors import FlowLayoutError, FlowParseError
from .visual.layout import LayoutOptions, build_layout
from .visual.models import ExecuteFlowRequest, ExecutionResult, Orientation
from .visual.parser import load_flow, sample_flow, save_flow
from .visual.render import to_render_payload
from .visual.validator import validate_flow


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flowcanvas", add_help=True)
    sub = p.add_subparsers(dest="command")

    init = sub.add_parser("init", help="Create a sample flow definition")
    init.add_argument("name", help="Name of the flow")
    init.add_argument("-o", "--output", default=None, help="Output file path (default: <name>.flow.<format>)")
    init.add_argument("-f", "--format", choices=["yaml", "json"], default="yaml", help="Output format (default: yaml)")

    val = sub.add_parser("validate", help="Validate a flow definition file")
    val.add_argument("flow", help="Path to flow definition (YAML or JSON)")

    lay = sub.add_parser("layout", help="Print the computed layout of a flow (JSON)")
    lay.add_argument("flow", help="Path to flow definition (YAML or JSON)")
    lay.add_argument(
        "--orientation",
        choices=[o.value for o in Orientation],
        default=Orientation.HORIZONTAL_LEVELS.value,
        help="Axis levels are laid out along (default: horizontal)",
    )
    lay.add_argument("--start-end", action="store_true", help="Add start/end nodes for flow inputs/outputs")
    lay.add_argument("--render", action="store_true", help="Print widget records instead of the layout model")

    test = sub.add_parser("test", help="Run a flow on the execution service and print the result")
    test.add_argument("flow", help="Path to flow definition (YAML or JSON)")
    test.add_argument("-i", "--input", action="append", default=[], help="Input value as key=value (repeatable)")
    test.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Execution timeout in seconds (default: FLOWCANVAS_EXECUTOR_TIMEOUT_S or 300)",
    )
    test.add_argument("--executor-url", default=None, help="Execution service base URL")
    test.add_argument("--executor-token", default=None, help="Bearer token for the execution service")

    sub.add_parser("version", help="Print the flowcanvas version")

    serve = sub.add_parser("serve", help="Run the flow viewer backend (FastAPI)")
    serve.add_argument("flow", nargs="?", default=os.getenv("FLOWCANVAS_FLOW_PATH") or None, help="Flow file to serve")
    serve.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    serve.add_argument("-p", "--port", type=int, default=int(os.getenv("PORT", "8080")))
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload (dev)")
    serve.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "info"))
    serve.add_argument(
        "-s",
        "--show-start-end-node",
        action="store_true",
        help="Show start and end nodes in the flow visualization",
    )
    serve.add_argument("--executor-url", default=os.getenv("FLOWCANVAS_EXECUTOR_URL") or "")
    serve.add_argument("--executor-token", default=os.getenv("FLOWCANVAS_EXECUTOR_TOKEN") or "")

    return p


def _cmd_init(ns: argparse.Namespace) -> int:
    out = ns.output or f"{ns.name}.flow.{ns.format}"
    path = Path(out)
    if path.exists():
        sys.stderr.write(f"file already exists: {path}\n")
        return 1
    save_flow(sample_flow(ns.name), path)
    sys.stdout.write(f"Created flow definition: {path}\n")
    return 0


def _cmd_validate(ns: argparse.Namespace) -> int:
    try:
        flow = load_flow(ns.flow)
    except FlowParseError as e:
        sys.stderr.write(f"failed to parse flow: {e}\n")
        return 1

    errors = validate_flow(flow)
    if errors:
        sys.stderr.write("validation failed:\n")
        for err in errors:
            sys.stderr.write(f"  - {err}\n")
        return 1

    sys.stdout.write(f"Flow '{flow.name}' is valid\n")
    sys.stdout.write(f"  - {len(flow.nodes)} nodes\n")
    sys.stdout.write(f"  - Default provider: {flow.config.default_provider or ''}\n")
    sys.stdout.write(f"  - Default model: {flow.config.default_model or ''}\n")
    return 0


def _cmd_layout(ns: argparse.Namespace) -> int:
    try:
        flow = load_flow(ns.flow)
    except FlowParseError as e:
        sys.stderr.write(f"failed to parse flow: {e}\n")
        return 1

    options = LayoutOptions(orientation=Orientation(ns.orientation), show_start_end_node=bool(ns.start_end))
    try:
        graph = build_layout(flow, options)
    except FlowLayoutError as e:
        sys.stderr.write(f"layout failed: {e}\n")
        return 1

    payload = to_render_payload(graph) if ns.render else graph.model_dump(mode="json", by_alias=True)
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    return 0


def _parse_inputs(pairs: List[str]) -> Dict[str, Any]:
    inputs: Dict[str, Any] = {}
    for arg in pairs:
        key, sep, value = arg.partition("=")
        if not sep:
            raise ValueError(f"invalid input format: {arg} (expected key=value)")
        if key in inputs:
            sys.stdout.write(f"warning: input {key} already defined, overriding with value {value}\n")
        inputs[key] = value
    return inputs


def _print_execution_result(result: ExecutionResult) -> None:
    out = sys.stdout
    out.write("=== Execution Result ===\n")
    out.write(f"Flow: {result.flow_name or ''}\n")
    out.write(f"Success: {str(result.success).lower()}\n")
    out.write(f"Duration: {result.duration}\n")
    if result.error:
        out.write(f"Error: {result.error}\n")

    out.write("\n=== Node Results ===\n")
    total_tokens = 0
    total_cost = 0.0
    for i, nr in enumerate(result.node_results or [], start=1):
        out.write(f"\n[{i}] Node: {nr.node_id}\n")
        out.write(f"    Success: {str(bool(nr.success)).lower()}\n")
        if nr.error:
            out.write(f"    Error: {nr.error}\n")
        m = nr.metrics
        if m is not None and (m.input_tokens or 0) > 0:
            input_tokens = m.input_tokens or 0
            output_tokens = m.output_tokens or 0
            out.write(f"    Tokens: {input_tokens + output_tokens} (input: {input_tokens}, output: {output_tokens})\n")
            total_tokens += input_tokens
        if m is not None and (m.input_cost or 0) > 0:
            input_cost = m.input_cost or 0.0
            output_cost = m.output_cost or 0.0
            out.write(
                f"    Cost: ${input_cost + output_cost:.6f} (input: ${input_cost:.6f}, output: ${output_cost:.6f})\n"
            )
            total_cost += input_cost + output_cost
        if nr.outputs:
            out.write("    Outputs:\n")
            for key, val in nr.outputs.items():
                out.write(f"      {key}: {val}\n")

    out.write("\n=== Summary ===\n")
    out.write(f"Total Tokens: {total_tokens}\n")
    if total_cost > 0:
        out.write(f"Total Cost: ${total_cost:.6f}\n")

    if result.outputs:
        out.write("\n=== Flow Outputs ===\n")
        out.write(json.dumps(result.outputs, indent=2, ensure_ascii=False) + "\n")


def _cmd_test(ns: argparse.Namespace) -> int:
    try:
        flow = load_flow(ns.flow)
    except FlowParseError as e:
        sys.stderr.write(f"failed to parse flow: {e}\n")
        return 1

    errors = validate_flow(flow)
    if errors:
        sys.stderr.write("validation failed:\n")
        for err in errors:
            sys.stderr.write(f"  - {err}\n")
        return 1

    try:
        inputs = _parse_inputs(list(ns.input or []))
    except ValueError as e:
        sys.stderr.write(f"{e}\n")
        return 1

    from web.backend.services.executor import execute_flow_remote
    from web.backend.services.settings import load_settings

    settings = load_settings()
    timeout_s = ns.timeout if ns.timeout is not None else settings.executor_timeout_s

    sys.stdout.write(f"Executing flow '{flow.name}'...\n\n")
    result = execute_flow_remote(
        ExecuteFlowRequest(flow=flow, inputs=inputs),
        executor_url=ns.executor_url or settings.executor_url,
        token=ns.executor_token or settings.executor_token,
        timeout_s=float(timeout_s),
    )
    if not result.success:
        sys.stderr.write(f"Execution failed: {result.error}\n\n")

    _print_execution_result(result)
    return 0 if result.success else 1


def _cmd_version(ns: argparse.Namespace) -> int:
    sys.stdout.write(f"flowcanvas version {__version__}\n")
    return 0


def _cmd_serve(ns: argparse.Namespace) -> int:
    flow_path: Optional[Path] = None
    if ns.flow:
        flow_path = Path(ns.flow)
        if not flow_path.is_file():
            sys.stderr.write(f"flow file does not exist: {flow_path}\n")
            return 1

    try:
        import uvicorn  # type: ignore
    except Exception:
        sys.stderr.write(
            "Server dependencies are not installed.\n"
            "Install with: pip install \"flowcanvas[server]\"\n"
        )
        return 2

    if flow_path is not None:
        os.environ["FLOWCANVAS_FLOW_PATH"] = str(flow_path.resolve())
    if ns.show_start_end_node:
        os.environ["FLOWCANVAS_SHOW_START_END_NODE"] = "1"

    executor_url = str(ns.executor_url or "").strip()
    executor_token = str(ns.executor_token or "").strip()
    if executor_url:
        os.environ["FLOWCANVAS_EXECUTOR_URL"] = executor_url
    if executor_token:
        os.environ["FLOWCANVAS_EXECUTOR_TOKEN"] = executor_token

    # Validate backend import early so we can give a clear error message.
    try:
        import web.backend.main  # noqa: F401
    except Exception as e:
        sys.stderr.write(
            "Failed to import the flow viewer backend.\n"
            f"Error: {e}\n"
            "Install with: pip install \"flowcanvas[server]\"\n"
        )
        return 2

    sys.stdout.write(f"Starting flow viewer on http://localhost:{ns.port}\n")
    uvicorn.run(
        "web.backend.main:app",
        host=str(ns.host),
        port=int(ns.port),
        reload=bool(ns.reload),
        log_level=str(ns.log_level),
    )
    return 0


def main(args: Optional[List[str]] = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    ns = parser.parse_args(args)

    if ns.command == "init":
        return _cmd_init(ns)
    if ns.command == "validate":
        return _cmd_validate(ns)
    if ns.command == "layout":
        return _cmd_layout(ns)
    if ns.command == "test":
        return _cmd_test(ns)
    if ns.command == "version":
        return _cmd_version(ns)
    if ns.command == "serve":
        return _cmd_serve(ns)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
