# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest


@pytest.fixture
def linear_definition():
    """A -> B, plus an unreachable C."""
    return {"initial": "A", "states": {"A": {"on": {"NEXT": "B"}}, "B": {}, "C": {}}}


@pytest.fixture
def loop_definition():
    """A <-> B."""
    return {"initial": "A", "states": {"A": {"on": {"NEXT": "B"}}, "B": {"on": {"BACK": "A"}}}}


@pytest.fixture
def traffic_light_definition():
    """A small machine with guards, actions, metadata and a final state."""
    return {
        "id": "traffic-light",
        "initial": "green",
        "states": {
            "green": {"type": "initial", "on": {"TIMER": "yellow", "POWER_OFF": "off"}, "meta": {"color": "#0f0"}},
            "yellow": {"on": {"TIMER": {"target": "red", "actions": ["startPedestrianCountdown"]}}},
            "red": {"on": {"TIMER": {"target": "green", "cond": "noPedestrians", "actions": []}}},
            "off": {"type": "final"},
        },
    }


@pytest.fixture
def parse():
    """The default parser entry point."""
    from fsmgraph.core.validations import parse_machine

    return parse_machine


@pytest.fixture
def loop_graph(parse, loop_definition):
    return parse(loop_definition)


@pytest.fixture
def traffic_light_graph(parse, traffic_light_definition):
    return parse(traffic_light_definition)


@pytest.fixture
def error_classes():
    """Provides a tuple of error classes for quick reference."""
    from fsmgraph.core.errors import (
        FSMError,
        MachineNotLoadedError,
        ParserError,
        SessionImportError,
        SessionRestoreError,
    )

    return (FSMError, ParserError, MachineNotLoadedError, SessionImportError, SessionRestoreError)
