# tests/unit/runtime/test_simulation.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import dataclasses

import pytest

from fsmgraph.core.errors import SessionRestoreError
from fsmgraph.core.guards import NamedGuards
from fsmgraph.runtime.simulation import (
    FailureReason,
    SimulationEngine,
    TransitionFailure,
    TransitionSuccess,
    simulate,
    transition,
)


class TestTransitionFunction:
    def test_success(self, traffic_light_graph):
        result = transition(traffic_light_graph, "yellow", "TIMER")
        assert result == TransitionSuccess(next_state_id="red", actions=("startPedestrianCountdown",))
        assert result.success

    def test_invalid_event(self, traffic_light_graph):
        result = transition(traffic_light_graph, "green", "JUMP")
        assert result == TransitionFailure(FailureReason.INVALID_EVENT)
        assert not result.success

    def test_unknown_state(self, traffic_light_graph):
        assert transition(traffic_light_graph, "blue", "TIMER") == TransitionFailure(FailureReason.NO_TRANSITION)

    def test_guards_are_satisfied_by_default(self, traffic_light_graph):
        assert transition(traffic_light_graph, "red", "TIMER").next_state_id == "green"

    def test_injected_guard_can_prevent(self, traffic_light_graph):
        guards = NamedGuards({"noPedestrians": False})
        result = transition(traffic_light_graph, "red", "TIMER", guards)
        assert result == TransitionFailure(FailureReason.GUARD_PREVENTED)

    def test_unguarded_transition_skips_evaluator(self, traffic_light_graph):
        def refuse(cond, t):
            raise AssertionError("evaluator must not be called")

        assert transition(traffic_light_graph, "green", "TIMER", refuse).success


class TestSimulationEngine:
    def test_initial_snapshot(self, loop_graph):
        state = SimulationEngine(loop_graph).get_state()
        assert state.active_state_id == "A"
        assert state.steps == 0
        assert state.history == ("A",)
        assert state.log == ("Initialized at A",)

    def test_send_success(self, loop_graph):
        engine = SimulationEngine(loop_graph)
        state = engine.send("NEXT")
        assert state.active_state_id == "B"
        assert state.steps == 1
        assert state.history == ("A", "B")
        assert state.log[-1] == "Event 'NEXT' -> Transitioned to 'B'"

    def test_send_unknown_event_only_logs(self, loop_graph):
        engine = SimulationEngine(loop_graph)
        before = engine.get_state()
        after = engine.send("BACK")
        assert after.active_state_id == before.active_state_id
        assert after.steps == before.steps
        assert after.history == before.history
        assert after.log == before.log + ("Event 'BACK' -> Failed: INVALID_EVENT",)

    def test_guard_failure_is_logged(self, traffic_light_graph):
        engine = SimulationEngine(traffic_light_graph, NamedGuards({"noPedestrians": False}))
        engine.send("TIMER")
        engine.send("TIMER")
        state = engine.send("TIMER")
        assert state.active_state_id == "red"
        assert state.log[-1] == "Event 'TIMER' -> Failed: GUARD_PREVENTED"

    def test_snapshots_are_immutable_and_detached(self, loop_graph):
        engine = SimulationEngine(loop_graph)
        snapshot = engine.get_state()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.steps = 5
        engine.send("NEXT")
        assert snapshot.history == ("A",)
        assert engine.get_state().history == ("A", "B")

    def test_reset_restores_construction_snapshot(self, loop_graph):
        engine = SimulationEngine(loop_graph)
        engine.send("NEXT")
        engine.send("BACK")
        state = engine.reset()
        assert state.active_state_id == "A"
        assert state.steps == 0
        assert state.history == ("A",)
        assert state.log == ("Reset to A",)

    def test_available_events(self, traffic_light_graph):
        engine = SimulationEngine(traffic_light_graph)
        assert engine.get_available_events() == ["TIMER", "POWER_OFF"]
        engine.send("POWER_OFF")
        assert engine.get_available_events() == []

    def test_determinism(self, traffic_light_graph):
        events = ["TIMER", "BOGUS", "TIMER", "TIMER", "POWER_OFF", "TIMER"]
        first = simulate(traffic_light_graph, events)
        second = simulate(traffic_light_graph, events)
        assert first == second
        assert first.history == ("green", "yellow", "red", "green", "off")
        assert first.steps == 4


class TestTimeTravel:
    @pytest.fixture
    def engine(self, loop_graph):
        engine = SimulationEngine(loop_graph)
        for event in ("NEXT", "BACK", "NEXT"):
            engine.send(event)
        return engine

    @pytest.mark.parametrize("index", [-1, 4, 100])
    def test_out_of_range_is_ignored(self, engine, index):
        before = engine.get_state()
        assert engine.time_travel(index) == before
        assert engine.get_state() == before

    @pytest.mark.parametrize("index", [0, 1, 2, 3])
    def test_in_range_truncates(self, engine, index):
        before = engine.get_state()
        state = engine.time_travel(index)
        assert state.steps == index
        assert state.active_state_id == before.history[index]
        assert state.history == before.history[: index + 1]
        assert state.log == before.log[: index + 1] + (f"Time traveled to step {index}",)

    def test_later_history_is_discarded(self, engine):
        engine.time_travel(1)
        state = engine.send("BACK")
        assert state.history == ("A", "B", "A")
        assert engine.time_travel(3).steps == 2


class TestRestore:
    def test_restore_history(self, loop_graph):
        engine = SimulationEngine.restore(loop_graph, ["A", "B", "A"])
        state = engine.get_state()
        assert state.active_state_id == "A"
        assert state.steps == 2
        assert state.history == ("A", "B", "A")
        assert state.log == ("Restored session at step 2",)

    def test_empty_history_starts_fresh(self, loop_graph):
        assert SimulationEngine.restore(loop_graph, []).get_state().history == ("A",)

    @pytest.mark.parametrize("history", [["B"], ["A", "Z"], ["A", "A"], ["A", ["B"]]])
    def test_inconsistent_history(self, loop_graph, history):
        with pytest.raises(SessionRestoreError):
            SimulationEngine.restore(loop_graph, history)

    def test_restore_respects_guards(self, traffic_light_graph):
        history = ["green", "yellow", "red", "green"]
        assert SimulationEngine.restore(traffic_light_graph, history).get_state().steps == 3

        blocked = NamedGuards({"noPedestrians": False})
        with pytest.raises(SessionRestoreError, match="step 3"):
            SimulationEngine.restore(traffic_light_graph, history, blocked)
        assert SimulationEngine.restore(traffic_light_graph, history[:3], blocked).get_state().active_state_id == "red"
