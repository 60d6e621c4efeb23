# fsmgraph/analysis/analyzer.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Static analysis of a machine graph.

Reachability is a breadth-first walk from the initial state. Cycle detection
is a depth-first walk that also starts only at the initial state, so loops
confined to unreachable subgraphs are not reported; those states surface as
orphans instead.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Set, Tuple

from fsmgraph.core.graph import MachineGraph
from fsmgraph.core.types import EventName, StateID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cycle:
    """
    A loop found by depth-first traversal. ``path`` is the stack slice from the
    re-entered state to the state holding the back-edge.
    """

    path: Tuple[StateID, ...]

    @property
    def members(self) -> FrozenSet[StateID]:
        return frozenset(self.path)

    def __iter__(self) -> Iterator[StateID]:
        return iter(self.path)

    def __len__(self) -> int:
        return len(self.path)


@dataclass(frozen=True)
class AnalysisResult:
    """
    Results of one analysis run. Always a fresh value; never shared across runs.

    Attributes:
        reachable: States reachable from the initial state.
        orphans: States defined but not reachable.
        dead_ends: Reachable, non-final states with no outgoing transitions.
        terminal: States of kind final.
        cycles: Loops reachable from the initial state, possibly overlapping.
        nondeterministic: State -> events bound more than once. Empty while a
            node holds at most one transition per event.
    """

    reachable: FrozenSet[StateID] = frozenset()
    orphans: FrozenSet[StateID] = frozenset()
    dead_ends: FrozenSet[StateID] = frozenset()
    terminal: FrozenSet[StateID] = frozenset()
    cycles: Tuple[Cycle, ...] = ()
    nondeterministic: Mapping[StateID, Tuple[EventName, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "nondeterministic", MappingProxyType(dict(self.nondeterministic)))

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reachable": sorted(self.reachable),
            "orphans": sorted(self.orphans),
            "deadEnds": sorted(self.dead_ends),
            "terminal": sorted(self.terminal),
            "cycles": [list(c.path) for c in self.cycles],
            "nondeterministic": {k: list(v) for k, v in self.nondeterministic.items()},
        }


def analyze_reachability(graph: MachineGraph) -> Tuple[FrozenSet[StateID], FrozenSet[StateID]]:
    """
    Breadth-first traversal from the initial state, O(states + transitions).

    :return: (reachable, orphans)
    """
    reachable: Set[StateID] = {graph.initial}
    queue = deque([graph.initial])

    while queue:
        state_id = queue.popleft()
        for target in graph.successors(state_id):
            if target not in reachable:
                reachable.add(target)
                queue.append(target)

    orphans = frozenset(sid for sid in graph.state_ids if sid not in reachable)
    return frozenset(reachable), orphans


def analyze_dead_ends(graph: MachineGraph, reachable: FrozenSet[StateID]) -> FrozenSet[StateID]:
    """
    Reachable, non-final states with no way out. Unreachable states are never
    classified here.
    """
    return frozenset(
        node.id for node in graph.nodes.values() if node.id in reachable and not node.is_final and not node.outgoing
    )


def analyze_cycles(graph: MachineGraph) -> Tuple[Cycle, ...]:
    """
    Depth-first traversal from the initial state with an explicit stack. Every
    edge into a state still on the stack records one cycle. Several back-edges
    into the same ancestor yield several, possibly overlapping, records.
    """
    cycles: List[Cycle] = []
    if graph.initial not in graph:
        return ()

    visited: Set[StateID] = {graph.initial}
    path: List[StateID] = [graph.initial]
    on_path: Dict[StateID, int] = {graph.initial: 0}
    frames = [iter(graph.successors(graph.initial))]

    while frames:
        target = next(frames[-1], None)
        if target is None:
            frames.pop()
            del on_path[path.pop()]
            continue

        if target not in visited:
            visited.add(target)
            on_path[target] = len(path)
            path.append(target)
            frames.append(iter(graph.successors(target)))
        elif target in on_path:
            cycles.append(Cycle(tuple(path[on_path[target] :])))

    return tuple(cycles)


def analyze_nondeterminism(graph: MachineGraph) -> Dict[StateID, Tuple[EventName, ...]]:
    """
    States with more than one transition for the same event. A node's table
    cannot hold two transitions per event, so this is empty for every graph
    the parser produces.
    """
    found: Dict[StateID, Tuple[EventName, ...]] = {}
    for node in graph.nodes.values():
        seen: Set[EventName] = set()
        dupes: List[EventName] = []
        for t in node.outgoing:
            if t.event in seen:
                dupes.append(t.event)
            seen.add(t.event)
        if dupes:
            found[node.id] = tuple(dupes)
    return found


def analyze_graph(graph: MachineGraph) -> AnalysisResult:
    """Run every analysis over ``graph`` and bundle the results."""
    reachable, orphans = analyze_reachability(graph)
    result = AnalysisResult(
        reachable=reachable,
        orphans=orphans,
        dead_ends=analyze_dead_ends(graph, reachable),
        terminal=frozenset(node.id for node in graph.nodes.values() if node.is_final),
        cycles=analyze_cycles(graph),
        nondeterministic=analyze_nondeterminism(graph),
    )
    logger.debug(
        "Analyzed '%s': %d reachable, %d orphans, %d dead ends, %d cycles",
        graph.id,
        len(result.reachable),
        len(result.orphans),
        len(result.dead_ends),
        len(result.cycles),
    )
    return result
