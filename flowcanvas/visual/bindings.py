"""Classification of node input/output bindings.

An input binding either reads a root input (`from: input`) or another node's
output (`from: <node_id>.<output_name>`). Anything else is inert: it yields no
dependency and no edge, and never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import InputBinding, OutputBinding


ROOT_INPUT = "input"
TERMINAL_OUTPUT = "output"


class BindingKind(str, Enum):
    ROOT = "root"
    NODE = "node"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ResolvedBinding:
    kind: BindingKind
    name: str
    producer_id: Optional[str] = None
    producer_output: Optional[str] = None


def resolve_input_binding(binding: InputBinding) -> ResolvedBinding:
    source = binding.from_
    if source == ROOT_INPUT:
        return ResolvedBinding(kind=BindingKind.ROOT, name=binding.name)

    parts = source.split(".") if isinstance(source, str) else []
    if len(parts) == 2 and all(parts):
        return ResolvedBinding(
            kind=BindingKind.NODE,
            name=binding.name,
            producer_id=parts[0],
            producer_output=parts[1],
        )
    return ResolvedBinding(kind=BindingKind.UNRESOLVED, name=binding.name)


def is_terminal_output(binding: OutputBinding) -> bool:
    return binding.to == TERMINAL_OUTPUT
