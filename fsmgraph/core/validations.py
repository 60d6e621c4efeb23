# fsmgraph/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from fsmgraph.core.config import DEFAULT_CONFIG, EngineConfig
from fsmgraph.core.errors import ParserError, ParserErrorCode
from fsmgraph.core.graph import MachineGraph
from fsmgraph.core.states import StateNode
from fsmgraph.core.transitions import Transition
from fsmgraph.core.types import EventName, JsonPath, StateID, StateKind

logger = logging.getLogger(__name__)

_KINDS = {kind.value: kind for kind in StateKind}


class MachineParser:
    """
    Turns an untyped, JSON-shaped machine definition into a validated
    MachineGraph. Construction runs in two passes: every node is created first
    so that forward references resolve regardless of declaration order, then
    each transition is normalized and linked. The first problem aborts the
    build; a partial graph is never returned.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        """
        :param config: Engine settings (duplicate policy, size limits, default id).
        """
        self._config = config or DEFAULT_CONFIG

    def parse(self, definition: Any) -> MachineGraph:
        """
        Build a graph from ``definition``.

        :param definition: ``{initial: str, states: {id: {on?, type?, meta?}}, id?: str}``.
        :return: The validated, frozen graph.
        :raises ParserError: On the first schema or reference problem found.
        """
        if not isinstance(definition, Mapping):
            raise ParserError(ParserErrorCode.INVALID_SCHEMA, "Input must be an object.")
        initial = definition.get("initial")
        if not isinstance(initial, str):
            raise ParserError(
                ParserErrorCode.MISSING_INITIAL, "Machine must define an 'initial' state ID.", ("initial",)
            )
        states = definition.get("states")
        if not isinstance(states, Mapping):
            raise ParserError(ParserErrorCode.INVALID_SCHEMA, "Machine must define a 'states' object.", ("states",))
        if len(states) > self._config.max_states:
            raise ParserError(
                ParserErrorCode.INVALID_SCHEMA,
                f"Machine defines {len(states)} states; the limit is {self._config.max_states}.",
                ("states",),
            )

        graph_id = definition.get("id")
        if not isinstance(graph_id, str):
            graph_id = self._config.default_machine_id

        nodes = self._create_nodes(states)

        if initial not in nodes:
            raise ParserError(
                ParserErrorCode.INVALID_REFERENCE,
                f"Initial state '{initial}' is not defined in 'states'.",
                ("initial",),
            )

        self._link_transitions(states, nodes)

        graph = MachineGraph(graph_id, initial, nodes)
        logger.debug(
            "Parsed machine '%s': %d states, %d transitions", graph.id, len(graph), graph.transition_count()
        )
        return graph

    def _create_nodes(self, states: Mapping[Any, Any]) -> Dict[StateID, StateNode]:
        nodes: Dict[StateID, StateNode] = {}
        for state_id, state_def in states.items():
            path = ("states", str(state_id))
            if not isinstance(state_id, str):
                raise ParserError(ParserErrorCode.INVALID_SCHEMA, f"State ID {state_id!r} must be a string.", path)
            if not isinstance(state_def, Mapping):
                raise ParserError(
                    ParserErrorCode.INVALID_SCHEMA, f"State '{state_id}' must be defined by an object.", path
                )

            raw_kind = state_def.get("type")
            if raw_kind is None:
                kind = StateKind.DEFAULT
            elif isinstance(raw_kind, str) and raw_kind in _KINDS:
                kind = _KINDS[raw_kind]
            else:
                raise ParserError(
                    ParserErrorCode.INVALID_SCHEMA,
                    f"State '{state_id}' has unknown type {raw_kind!r}; expected one of {sorted(_KINDS)}.",
                    path + ("type",),
                )

            meta = state_def.get("meta")
            if meta is not None and not isinstance(meta, Mapping):
                raise ParserError(
                    ParserErrorCode.INVALID_SCHEMA, f"State '{state_id}' has non-object 'meta'.", path + ("meta",)
                )

            nodes[state_id] = StateNode(state_id, kind, meta, self._config.duplicate_policy)
        return nodes

    def _link_transitions(self, states: Mapping[StateID, Any], nodes: Dict[StateID, StateNode]) -> None:
        count = 0
        for state_id, state_def in states.items():
            handlers = state_def.get("on")
            if handlers is None:
                continue
            if not isinstance(handlers, Mapping):
                raise ParserError(
                    ParserErrorCode.INVALID_SCHEMA,
                    f"State '{state_id}' has non-object 'on'.",
                    ("states", state_id, "on"),
                )

            source = nodes[state_id]
            for event, target_def in handlers.items():
                path = ("states", state_id, "on", str(event))
                transition = _normalize_transition(target_def, state_id, event, path)
                if transition.target not in nodes:
                    raise ParserError(
                        ParserErrorCode.INVALID_REFERENCE,
                        f"State '{state_id}' transitions to unknown target '{transition.target}' on event '{event}'.",
                        path,
                    )

                count += 1
                if count > self._config.max_transitions:
                    raise ParserError(
                        ParserErrorCode.INVALID_SCHEMA,
                        f"Machine defines more than {self._config.max_transitions} transitions.",
                        path,
                    )
                source.add_transition(transition)


def _normalize_transition(target_def: Any, source: StateID, event: EventName, path: JsonPath) -> Transition:
    """
    Expand the bare-string shorthand and check the object form.
    """
    if not isinstance(event, str):
        raise ParserError(ParserErrorCode.INVALID_SCHEMA, f"Event name {event!r} must be a string.", path)

    if isinstance(target_def, str):
        return Transition(source=source, target=target_def, event=event)

    if not isinstance(target_def, Mapping):
        raise ParserError(
            ParserErrorCode.INVALID_SCHEMA,
            f"Transition for event '{event}' in state '{source}' must be a string or an object.",
            path,
        )

    target = target_def.get("target")
    if not isinstance(target, str):
        raise ParserError(
            ParserErrorCode.INVALID_SCHEMA,
            f"Transition for event '{event}' in state '{source}' must name a string 'target'.",
            path + ("target",),
        )

    cond = target_def.get("cond")
    if cond is not None and not isinstance(cond, str):
        raise ParserError(ParserErrorCode.INVALID_SCHEMA, "Guard 'cond' must be a string.", path + ("cond",))

    actions = target_def.get("actions")
    if actions is None:
        actions = ()
    elif isinstance(actions, (str, bytes)) or not isinstance(actions, Sequence):
        raise ParserError(ParserErrorCode.INVALID_SCHEMA, "'actions' must be a list of strings.", path + ("actions",))
    elif not all(isinstance(a, str) for a in actions):
        raise ParserError(ParserErrorCode.INVALID_SCHEMA, "'actions' must be a list of strings.", path + ("actions",))

    return Transition(source=source, target=target, event=event, cond=cond, actions=tuple(actions))


def parse_machine(definition: Any, config: Optional[EngineConfig] = None) -> MachineGraph:
    """Parse ``definition`` into a MachineGraph with the given (or default) config."""
    return MachineParser(config).parse(definition)


class DefinitionIssue(NamedTuple):
    code: str
    message: str
    path: Optional[Tuple[str, ...]] = None


def validate_definition(definition: Any) -> List[DefinitionIssue]:
    """
    Check a definition without building a graph and report every problem at
    once instead of stopping at the first one.

    Checks:
    - 'states' is present and non-empty (MISSING_STATES)
    - 'initial' names a defined state (INVALID_INITIAL)
    - every transition target names a defined state (INVALID_TARGET)

    :param definition: Raw machine definition.
    :return: Issues found, empty if the definition is sound.
    """
    states = definition.get("states") if isinstance(definition, Mapping) else None
    if not isinstance(states, Mapping) or not states:
        return [DefinitionIssue("MISSING_STATES", "Machine must have at least one state defined in 'states'.")]

    issues: List[DefinitionIssue] = []
    initial = definition.get("initial")
    if not isinstance(initial, str) or initial not in states:
        issues.append(
            DefinitionIssue(
                "INVALID_INITIAL", f"Initial state '{initial}' is not defined in 'states'.", ("initial",)
            )
        )

    for source, state_def in states.items():
        handlers = state_def.get("on") if isinstance(state_def, Mapping) else None
        if not isinstance(handlers, Mapping):
            continue
        for event, target_def in handlers.items():
            target = target_def.get("target") if isinstance(target_def, Mapping) else target_def
            if isinstance(target, str) and target and target not in states:
                issues.append(
                    DefinitionIssue(
                        "INVALID_TARGET",
                        f"State '{source}' transitions to unknown state '{target}' on event '{event}'.",
                        ("states", str(source), "on", str(event)),
                    )
                )
    return issues
