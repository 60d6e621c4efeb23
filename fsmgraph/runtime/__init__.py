"""
Runtime package: event-driven simulation with history and time travel.
"""

from .simulation import (
    FailureReason,
    SimulationEngine,
    SimulationState,
    TransitionFailure,
    TransitionSuccess,
    simulate,
    transition,
)

__all__ = [
    "FailureReason",
    "SimulationEngine",
    "SimulationState",
    "TransitionFailure",
    "TransitionSuccess",
    "simulate",
    "transition",
]
