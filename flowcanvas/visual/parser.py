"""Reading and writing flow definition files (YAML or JSON)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from ..errors import FlowParseError
from .models import Flow, FlowConfig, FlowNode, InputBinding, OutputBinding

logger = logging.getLogger(__name__)


def _decode(data: bytes, filename: str) -> Any:
    ext = Path(filename).suffix.lower()
    text = data.decode("utf-8")
    if ext == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FlowParseError(f"failed to parse JSON: {e}") from e
    if ext in (".yaml", ".yml"):
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise FlowParseError(f"failed to parse YAML: {e}") from e

    # Unknown extension: YAML first (JSON is mostly YAML too), then JSON.
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FlowParseError(f"failed to parse as YAML or JSON: {e}") from e


def parse_flow_bytes(data: Union[bytes, str], filename: str = "flow.yaml") -> Flow:
    """Decode a flow definition; the format is picked from `filename`'s extension."""
    raw = data.encode("utf-8") if isinstance(data, str) else data
    try:
        payload = _decode(raw, filename)
    except UnicodeDecodeError as e:
        raise FlowParseError(f"flow is not valid UTF-8: {e}") from e

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise FlowParseError(f"flow must be a mapping, got {type(payload).__name__}")
    try:
        return Flow.model_validate(payload)
    except ValidationError as e:
        raise FlowParseError(f"invalid flow definition: {e}") from e


def load_flow(path: Union[str, Path]) -> Flow:
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise FlowParseError(f"failed to read file: {e}") from e
    flow = parse_flow_bytes(raw, p.name)
    logger.info(f"Loaded flow '{flow.name}' ({len(flow.nodes)} nodes) from {p}")
    return flow


def dump_flow(flow: Flow, fmt: str = "yaml") -> str:
    payload = flow.model_dump(mode="json", by_alias=True, exclude_none=True)
    if fmt == "json":
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unknown flow format: {fmt}")


def save_flow(flow: Flow, path: Union[str, Path]) -> Path:
    p = Path(path)
    ext = p.suffix.lower()
    if ext == ".json":
        text = dump_flow(flow, "json")
    elif ext in (".yaml", ".yml"):
        text = dump_flow(flow, "yaml")
    else:
        raise FlowParseError(f"unsupported file extension: {ext} (use .json, .yaml, or .yml)")
    p.write_text(text, encoding="utf-8")
    logger.info(f"Saved flow '{flow.name}' to {p}")
    return p


def sample_flow(name: str) -> Flow:
    """A single-node starter flow: one root input in, one terminal output out."""
    return Flow(
        version="1.0",
        name=name,
        description="A sample prompt flow",
        config=FlowConfig(default_provider="github_playground_openai", default_model="openai/gpt-4o-mini"),
        nodes=[
            FlowNode(
                id="process",
                type="llm",
                provider="github_playground_openai",
                model="openai/gpt-4o-mini",
                inputs=[InputBinding(name="user_input", from_="input")],
                prompt=(
                    "You are a helpful assistant.\n"
                    "\n"
                    "User input: {{.user_input}}\n"
                    "\n"
                    "Please provide a helpful response.\n"
                ),
                outputs=[OutputBinding(name="response", to="output")],
            )
        ],
    )
