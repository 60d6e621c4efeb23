# tests/unit/core/test_states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging

import pytest

from fsmgraph.core.errors import DuplicateTransitionError, GraphFrozenError, ParserError
from fsmgraph.core.graph import MachineGraph
from fsmgraph.core.states import StateNode
from fsmgraph.core.transitions import Transition
from fsmgraph.core.types import DuplicatePolicy, StateKind
from fsmgraph.persistence.serializer import graph_to_json


def test_transition_defaults():
    t = Transition(source="A", target="B", event="GO")
    assert t.cond is None
    assert t.actions == ()
    assert t.is_shorthand


def test_transition_copies_actions():
    actions = ["log"]
    t = Transition(source="A", target="B", event="GO", actions=actions)
    actions.append("beep")
    assert t.actions == ("log",)
    assert not t.is_shorthand


def test_guarded_transition_is_not_shorthand():
    assert not Transition(source="A", target="B", event="GO", cond="ready").is_shorthand


def test_node_defaults():
    node = StateNode("A")
    assert node.id == "A"
    assert node.kind is StateKind.DEFAULT
    assert not node.is_final
    assert dict(node.meta) == {}
    assert node.outgoing == ()


def test_node_meta_is_copied():
    meta = {"label": "Start", "pos": {"x": 1}}
    node = StateNode("A", meta=meta)
    meta["pos"]["x"] = 99
    assert node.meta["pos"] == {"x": 1}
    with pytest.raises(TypeError):
        node.meta["label"] = "changed"


def test_nested_meta_is_read_only(parse):
    graph = parse({"initial": "A", "states": {"A": {"meta": {"pos": {"x": 1}, "tags": ["a"]}}}})
    meta = graph.get_node("A").meta
    with pytest.raises(TypeError):
        meta["pos"]["x"] = 99
    assert meta["tags"] == ("a",)
    assert not hasattr(meta["tags"], "append")

    exported = graph_to_json(graph)["states"]["A"]["meta"]
    assert exported == {"pos": {"x": 1}, "tags": ["a"]}
    assert type(exported["pos"]) is dict
    assert type(exported["tags"]) is list


def test_meta_dict_is_detached():
    node = StateNode("A", meta={"pos": {"x": 1}})
    thawed = node.meta_dict()
    thawed["pos"]["x"] = 99
    assert node.meta["pos"]["x"] == 1


def test_add_transition_indexes_by_event():
    node = StateNode("A")
    go = Transition("A", "B", "GO")
    stop = Transition("A", "C", "STOP")
    node.add_transition(go)
    node.add_transition(stop)
    assert node.get_transition("GO") is go
    assert list(node.transitions) == ["GO", "STOP"]
    assert node.outgoing == (go, stop)


def test_add_transition_rejects_foreign_source():
    node = StateNode("A")
    with pytest.raises(ValueError):
        node.add_transition(Transition("B", "A", "GO"))


def test_overwrite_policy_last_write_wins(caplog):
    node = StateNode("A", duplicate_policy=DuplicatePolicy.OVERWRITE)
    first = Transition("A", "B", "GO")
    other = Transition("A", "C", "STOP")
    second = Transition("A", "D", "GO")
    node.add_transition(first)
    node.add_transition(other)

    with caplog.at_level(logging.WARNING, logger="fsmgraph.core.states"):
        node.add_transition(second)

    assert node.get_transition("GO") is second
    # One transition per event; the replacement keeps the earlier position.
    assert node.outgoing == (second, other)
    assert "overwriting" in caplog.text


def test_reject_policy_raises():
    node = StateNode("A", duplicate_policy=DuplicatePolicy.REJECT)
    node.add_transition(Transition("A", "B", "GO"))
    with pytest.raises(DuplicateTransitionError) as exc_info:
        node.add_transition(Transition("A", "C", "GO"))
    assert exc_info.value.event == "GO"
    assert node.get_transition("GO").target == "B"


def test_graph_freezes_nodes():
    a = StateNode("A")
    b = StateNode("B")
    a.add_transition(Transition("A", "B", "GO"))
    graph = MachineGraph("m", "A", {"A": a, "B": b})

    with pytest.raises(GraphFrozenError):
        b.add_transition(Transition("B", "A", "BACK"))
    assert graph.transition_count() == 1


def test_graph_rejects_unknown_initial():
    with pytest.raises(ParserError) as exc_info:
        MachineGraph("m", "X", {"A": StateNode("A")})
    assert exc_info.value.path == ("initial",)


def test_graph_rejects_dangling_target():
    a = StateNode("A")
    a.add_transition(Transition("A", "Z", "GO"))
    with pytest.raises(ParserError) as exc_info:
        MachineGraph("m", "A", {"A": a})
    assert exc_info.value.path == ("states", "A", "on", "GO")


def test_graph_accessors():
    a = StateNode("A")
    b = StateNode("B", kind=StateKind.FINAL)
    a.add_transition(Transition("A", "B", "GO"))
    graph = MachineGraph("m", "A", {"A": a, "B": b})

    assert graph.id == "m"
    assert graph.initial == "A"
    assert graph.state_ids == ("A", "B")
    assert len(graph) == 2
    assert "B" in graph and "Z" not in graph
    assert graph.successors("A") == ["B"]
    assert graph.successors("Z") == []
    assert [t.event for t in graph.transitions()] == ["GO"]
    with pytest.raises(TypeError):
        graph.nodes["C"] = StateNode("C")
