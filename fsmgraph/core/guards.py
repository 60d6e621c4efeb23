# fsmgraph/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Protocol, runtime_checkable

from fsmgraph.core.transitions import Transition


@runtime_checkable
class GuardEvaluator(Protocol):
    """
    Guard evaluation capability injected into the transition function.

    Methods:
        __call__(cond, transition): Returns True if the guard named ``cond``
            allows ``transition`` to fire.

    Runtime Invariants:
    - Evaluation is free of side effects.
    - Only called for transitions that carry a guard identifier.
    """

    def __call__(self, cond: str, transition: Transition) -> bool: ...


def allow_all_guards(cond: str, transition: Transition) -> bool:
    """
    Default evaluator. Guard identifiers are recognized but never evaluated:
    there is no extended-state context to evaluate them against yet.
    """
    return True


class NamedGuards:
    """
    Evaluator backed by a fixed table of guard name -> outcome. Guards missing
    from the table fall back to ``default``.
    """

    def __init__(self, outcomes: dict, default: bool = True) -> None:
        self._outcomes = dict(outcomes)
        self._default = default

    def __call__(self, cond: str, transition: Transition) -> bool:
        return bool(self._outcomes.get(cond, self._default))
