from __future__ import annotations

import pytest

from flowcanvas.visual.bindings import BindingKind, is_terminal_output, resolve_input_binding
from flowcanvas.visual.models import InputBinding, OutputBinding


def test_root_input_binding_has_no_producer() -> None:
    r = resolve_input_binding(InputBinding.model_validate({"name": "question", "from": "input"}))
    assert r.kind is BindingKind.ROOT
    assert r.name == "question"
    assert r.producer_id is None


def test_node_binding_extracts_producer_and_output() -> None:
    r = resolve_input_binding(InputBinding.model_validate({"name": "x", "from": "a.out1"}))
    assert r.kind is BindingKind.NODE
    assert (r.producer_id, r.producer_output) == ("a", "out1")


@pytest.mark.parametrize("source", ["badformat", "a.b.c", ".out", "a.", "", "Input"])
def test_malformed_bindings_are_unresolved_and_never_raise(source: str) -> None:
    r = resolve_input_binding(InputBinding.model_validate({"name": "x", "from": source}))
    assert r.kind is BindingKind.UNRESOLVED
    assert r.producer_id is None


def test_terminal_output_requires_exact_sentinel() -> None:
    assert is_terminal_output(OutputBinding(name="answer", to="output")) is True
    assert is_terminal_output(OutputBinding(name="answer")) is False
    assert is_terminal_output(OutputBinding(name="answer", to="outputs")) is False
