# fsmgraph/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from fsmgraph.core.types import EventName, StateID


@dataclass(frozen=True)
class Transition:
    """
    Defines a directed, event-labeled path from one state to another, with an
    optional guard identifier and the ordered action identifiers it carries.
    Guards and actions are names only; nothing here executes them.
    """

    source: StateID
    target: StateID
    event: EventName
    cond: Optional[str] = None
    actions: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of action names, store an immutable copy.
        object.__setattr__(self, "actions", tuple(self.actions))

    @property
    def is_shorthand(self) -> bool:
        """
        True when the transition can be written as a bare target string.
        """
        return self.cond is None and not self.actions
