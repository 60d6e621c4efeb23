# fsmgraph/runtime/simulation.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from fsmgraph.core.errors import SessionRestoreError
from fsmgraph.core.graph import MachineGraph
from fsmgraph.core.guards import GuardEvaluator, allow_all_guards
from fsmgraph.core.types import EventName, StateID

logger = logging.getLogger(__name__)


class FailureReason(Enum):
    INVALID_EVENT = "INVALID_EVENT"  # active state has no entry for the event
    NO_TRANSITION = "NO_TRANSITION"  # active state is not a node of the graph
    GUARD_PREVENTED = "GUARD_PREVENTED"  # guard evaluator rejected the transition


@dataclass(frozen=True)
class TransitionSuccess:
    next_state_id: StateID
    actions: Tuple[str, ...]

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class TransitionFailure:
    reason: FailureReason

    @property
    def success(self) -> bool:
        return False


TransitionResult = Union[TransitionSuccess, TransitionFailure]


def transition(
    graph: MachineGraph,
    current_state_id: StateID,
    event: EventName,
    guards: GuardEvaluator = allow_all_guards,
) -> TransitionResult:
    """
    Pure transition function: (graph, current state, event) -> result.

    :param graph: The machine graph.
    :param current_state_id: State the event is delivered to.
    :param event: Event name.
    :param guards: Evaluator consulted for transitions carrying a guard.
    :return: TransitionSuccess with the next state and actions, or TransitionFailure.
    """
    node = graph.get_node(current_state_id)
    if node is None:
        return TransitionFailure(FailureReason.NO_TRANSITION)

    t = node.get_transition(event)
    if t is None:
        return TransitionFailure(FailureReason.INVALID_EVENT)

    if t.cond is not None and not guards(t.cond, t):
        return TransitionFailure(FailureReason.GUARD_PREVENTED)

    return TransitionSuccess(next_state_id=t.target, actions=t.actions)


@dataclass(frozen=True)
class SimulationState:
    """
    Immutable snapshot of a simulation.

    Attributes:
        active_state_id: State the machine is currently in.
        steps: Number of successful transitions taken; ``len(history) - 1``.
        history: Visited states, initial state first.
        log: Human-readable record of what happened.
    """

    active_state_id: StateID
    steps: int
    history: Tuple[StateID, ...]
    log: Tuple[str, ...]


class SimulationEngine:
    """
    Stateful executor over one machine graph. Every mutation replaces the whole
    SimulationState value; callers only ever receive those immutable snapshots.
    Failed events never raise, they are written to the log.
    """

    def __init__(self, graph: MachineGraph, guards: GuardEvaluator = allow_all_guards) -> None:
        """
        :param graph: Graph to simulate.
        :param guards: Guard evaluator handed to the transition function.
        """
        self._graph = graph
        self._guards = guards
        self._initial = graph.initial
        self._state = SimulationState(
            active_state_id=self._initial,
            steps=0,
            history=(self._initial,),
            log=(f"Initialized at {self._initial}",),
        )

    @classmethod
    def restore(
        cls, graph: MachineGraph, history: Sequence[StateID], guards: GuardEvaluator = allow_all_guards
    ) -> "SimulationEngine":
        """
        Rebuild an engine whose history equals ``history``, e.g. from an imported session.

        :raises SessionRestoreError: If the history does not start at the initial
            state, names an unknown state, or takes a step no transition
            allows under ``guards``.
        """
        engine = cls(graph, guards)
        if not history:
            return engine

        if history[0] != graph.initial:
            raise SessionRestoreError(
                f"History starts at '{history[0]}' but the machine starts at '{graph.initial}'."
            )
        for index, (prev, nxt) in enumerate(zip(history, history[1:]), start=1):
            if not isinstance(nxt, str) or nxt not in graph:
                raise SessionRestoreError(f"History step {index} names unknown state '{nxt}'.")
            if not _step_allowed(graph, prev, nxt, guards):
                raise SessionRestoreError(
                    f"History step {index} moves from '{prev}' to '{nxt}' without an allowed transition."
                )

        steps = len(history) - 1
        engine._state = SimulationState(
            active_state_id=history[-1],
            steps=steps,
            history=tuple(history),
            log=(f"Restored session at step {steps}",),
        )
        return engine

    @property
    def graph(self) -> MachineGraph:
        return self._graph

    def get_state(self) -> SimulationState:
        return self._state

    def send(self, event: EventName) -> SimulationState:
        """
        Deliver an event to the active state.

        :param event: Event name.
        :return: Snapshot after the event was handled.
        """
        current = self._state
        result = transition(self._graph, current.active_state_id, event, self._guards)

        if isinstance(result, TransitionSuccess):
            nxt = result.next_state_id
            self._state = SimulationState(
                active_state_id=nxt,
                steps=current.steps + 1,
                history=current.history + (nxt,),
                log=current.log + (f"Event '{event}' -> Transitioned to '{nxt}'",),
            )
            logger.debug("'%s' --%s--> '%s'", current.active_state_id, event, nxt)
        else:
            self._state = SimulationState(
                active_state_id=current.active_state_id,
                steps=current.steps,
                history=current.history,
                log=current.log + (f"Event '{event}' -> Failed: {result.reason.value}",),
            )
            logger.debug("Event '%s' rejected in '%s': %s", event, current.active_state_id, result.reason.value)

        return self._state

    def reset(self) -> SimulationState:
        """Return to the state captured at construction."""
        self._state = SimulationState(
            active_state_id=self._initial,
            steps=0,
            history=(self._initial,),
            log=(f"Reset to {self._initial}",),
        )
        return self._state

    def get_available_events(self) -> List[EventName]:
        """Events the active state has a transition for, in table order."""
        node = self._graph.get_node(self._state.active_state_id)
        return list(node.transitions) if node else []

    def time_travel(self, step_index: int) -> SimulationState:
        """
        Jump back to ``history[step_index]``. Later history is discarded for
        good; out-of-range indices leave the simulation untouched.

        :param step_index: Index into the current history.
        :return: Snapshot after the jump (or the unchanged snapshot).
        """
        current = self._state
        if step_index < 0 or step_index >= len(current.history):
            return current

        self._state = SimulationState(
            active_state_id=current.history[step_index],
            steps=step_index,
            history=current.history[: step_index + 1],
            log=current.log[: step_index + 1] + (f"Time traveled to step {step_index}",),
        )
        logger.debug("Time traveled to step %d ('%s')", step_index, self._state.active_state_id)
        return self._state

    def __repr__(self) -> str:
        return f"SimulationEngine(graph={self._graph.id!r}, active={self._state.active_state_id!r})"


def _step_allowed(graph: MachineGraph, source: StateID, target: StateID, guards: GuardEvaluator) -> bool:
    node = graph.get_node(source)
    if node is None:
        return False
    for t in node.outgoing:
        if t.target != target:
            continue
        result = transition(graph, source, t.event, guards)
        if isinstance(result, TransitionSuccess) and result.next_state_id == target:
            return True
    return False


def simulate(graph: MachineGraph, events: Sequence[EventName], guards: Optional[GuardEvaluator] = None) -> SimulationState:
    """Run ``events`` through a fresh engine and return the final snapshot."""
    engine = SimulationEngine(graph, guards or allow_all_guards)
    for event in events:
        engine.send(event)
    return engine.get_state()
