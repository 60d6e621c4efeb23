# fsmgraph/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping as AbcMapping
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fsmgraph.core.errors import DuplicateTransitionError, GraphFrozenError
from fsmgraph.core.transitions import Transition
from fsmgraph.core.types import DuplicatePolicy, EventName, StateID, StateKind

logger = logging.getLogger(__name__)


def freeze_value(value: Any) -> Any:
    """
    Recursively convert JSON-like data into read-only form: mappings become
    MappingProxyType views, lists and tuples become tuples.
    """
    if isinstance(value, AbcMapping):
        return MappingProxyType({k: freeze_value(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_value(v) for v in value)
    return copy.deepcopy(value)


def thaw_value(value: Any) -> Any:
    """Inverse of freeze_value: plain dicts and lists, detached from the source."""
    if isinstance(value, AbcMapping):
        return {k: thaw_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw_value(v) for v in value]
    return copy.deepcopy(value)


class _TransitionTable:
    """
    Internal event -> transition index for one node. Keeps the outgoing list and
    the lookup table consistent: there is never more than one transition per
    event, and the outgoing order is the order in which events were first seen.
    """

    def __init__(self, owner: StateID, policy: DuplicatePolicy) -> None:
        self._owner = owner
        self._policy = policy
        self._by_event: Dict[EventName, Transition] = {}
        self._outgoing: List[Transition] = []

    def insert(self, transition: Transition) -> None:
        existing = self._by_event.get(transition.event)
        if existing is None:
            self._by_event[transition.event] = transition
            self._outgoing.append(transition)
            return

        if self._policy is DuplicatePolicy.REJECT:
            raise DuplicateTransitionError(self._owner, transition.event)

        logger.warning(
            "State '%s' already handles event '%s' (-> '%s'); overwriting with -> '%s'",
            self._owner,
            transition.event,
            existing.target,
            transition.target,
        )
        self._by_event[transition.event] = transition
        self._outgoing[self._outgoing.index(existing)] = transition

    def get(self, event: EventName) -> Optional[Transition]:
        return self._by_event.get(event)

    @property
    def by_event(self) -> Mapping[EventName, Transition]:
        return MappingProxyType(self._by_event)

    @property
    def outgoing(self) -> Tuple[Transition, ...]:
        return tuple(self._outgoing)


class StateNode:
    """
    A vertex of the machine graph: its identity, its kind, the transitions that
    leave it, and free-form metadata. Nodes are filled in while a graph is being
    built and become read-only once the graph freezes them.
    """

    def __init__(
        self,
        state_id: StateID,
        kind: StateKind = StateKind.DEFAULT,
        meta: Optional[Mapping[str, Any]] = None,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.OVERWRITE,
    ) -> None:
        """
        :param state_id: Identifier of this state within the machine.
        :param kind: Initial, final or default.
        :param meta: Open metadata mapping, frozen recursively on the way in.
        :param duplicate_policy: What to do when an event is bound twice.
        """
        self._id = state_id
        self._kind = kind
        self._meta: Mapping[str, Any] = freeze_value(meta or {})
        self._table = _TransitionTable(state_id, duplicate_policy)
        self._frozen = False

    @property
    def id(self) -> StateID:
        return self._id

    @property
    def kind(self) -> StateKind:
        return self._kind

    @property
    def is_final(self) -> bool:
        return self._kind is StateKind.FINAL

    @property
    def meta(self) -> Mapping[str, Any]:
        """Deeply read-only node metadata: nested mappings are proxies, sequences are tuples."""
        return self._meta

    def meta_dict(self) -> Dict[str, Any]:
        """A mutable, detached copy of the metadata as plain dicts and lists."""
        return thaw_value(self._meta)

    @property
    def transitions(self) -> Mapping[EventName, Transition]:
        """Event name -> transition, in first-insertion order."""
        return self._table.by_event

    @property
    def outgoing(self) -> Tuple[Transition, ...]:
        """Outgoing transitions in declaration order."""
        return self._table.outgoing

    def add_transition(self, transition: Transition) -> None:
        """
        Bind a transition to this node under its event.

        :param transition: Transition whose source is this node.
        :raises GraphFrozenError: If the owning graph has already been built.
        :raises DuplicateTransitionError: If the event is bound and the policy is REJECT.
        """
        if self._frozen:
            raise GraphFrozenError(f"State '{self._id}' belongs to a built graph and cannot be modified.")
        if transition.source != self._id:
            raise ValueError(f"Transition source '{transition.source}' does not match state '{self._id}'")
        self._table.insert(transition)

    def get_transition(self, event: EventName) -> Optional[Transition]:
        return self._table.get(event)

    def freeze(self) -> None:
        self._frozen = True

    def __repr__(self) -> str:
        return f"StateNode(id={self._id!r}, kind={self._kind.value!r}, outgoing={len(self.outgoing)})"
