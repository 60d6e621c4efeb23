# fsmgraph/core/graph.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Validated, immutable machine graph."""

from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from fsmgraph.core.errors import ParserError, ParserErrorCode
from fsmgraph.core.states import StateNode
from fsmgraph.core.transitions import Transition
from fsmgraph.core.types import StateID


class MachineGraph:
    """
    The normalized directed graph of states and transitions. Built once from a
    complete set of nodes; every node is frozen on construction so the graph
    cannot change afterwards.
    """

    def __init__(self, graph_id: str, initial: StateID, nodes: Mapping[StateID, StateNode]) -> None:
        """
        :param graph_id: Machine identifier.
        :param initial: Identifier of the initial state.
        :param nodes: Every node of the machine, keyed by id, in declaration order.
        :raises ParserError: If the initial state or any transition target is not a node.
        """
        self._id = graph_id
        self._initial = initial
        self._nodes: Dict[StateID, StateNode] = dict(nodes)

        if initial not in self._nodes:
            raise ParserError(
                ParserErrorCode.INVALID_REFERENCE,
                f"Initial state '{initial}' is not defined in 'states'.",
                ("initial",),
            )
        for node in self._nodes.values():
            for t in node.outgoing:
                if t.target not in self._nodes:
                    raise ParserError(
                        ParserErrorCode.INVALID_REFERENCE,
                        f"State '{node.id}' transitions to unknown target '{t.target}' on event '{t.event}'.",
                        ("states", node.id, "on", t.event),
                    )
            node.freeze()

    @property
    def id(self) -> str:
        return self._id

    @property
    def initial(self) -> StateID:
        return self._initial

    @property
    def nodes(self) -> Mapping[StateID, StateNode]:
        return MappingProxyType(self._nodes)

    @property
    def state_ids(self) -> Tuple[StateID, ...]:
        return tuple(self._nodes)

    def get_node(self, state_id: StateID) -> Optional[StateNode]:
        return self._nodes.get(state_id)

    def transitions(self) -> Iterator[Transition]:
        """Iterate every transition of the graph, node by node."""
        for node in self._nodes.values():
            yield from node.outgoing

    def transition_count(self) -> int:
        return sum(len(node.outgoing) for node in self._nodes.values())

    def successors(self, state_id: StateID) -> List[StateID]:
        node = self._nodes.get(state_id)
        return [t.target for t in node.outgoing] if node else []

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"MachineGraph(id={self._id!r}, initial={self._initial!r}, states={len(self._nodes)})"
