# fsmgraph/core/config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from fsmgraph.core.guards import GuardEvaluator, allow_all_guards
from fsmgraph.core.types import DuplicatePolicy


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine-wide settings shared by the parser, the simulator and the facade.

    Attributes:
        duplicate_policy: Insertion policy for a second transition on the same event.
        max_states: Upper bound on the number of states in one definition.
        max_transitions: Upper bound on the number of transitions in one definition.
        default_machine_id: Graph id used when the definition carries none.
        guard_evaluator: Capability deciding whether a guarded transition may fire.
    """

    duplicate_policy: DuplicatePolicy = DuplicatePolicy.OVERWRITE
    max_states: int = 1000
    max_transitions: int = 5000
    default_machine_id: str = "machine"
    guard_evaluator: GuardEvaluator = field(default=allow_all_guards)

    def __post_init__(self) -> None:
        if self.max_states < 1:
            raise ValueError("max_states must be at least 1")
        if self.max_transitions < 0:
            raise ValueError("max_transitions must not be negative")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EngineConfig":
        """
        Build a config from plain values, e.g. a parsed settings file.

        :param values: Field name -> value. ``duplicate_policy`` may be given as a string.
        :raises ValueError: On unknown keys or an unknown duplicate policy.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        kwargs = dict(values)
        policy = kwargs.get("duplicate_policy")
        if isinstance(policy, str):
            kwargs["duplicate_policy"] = DuplicatePolicy(policy.lower())
        return cls(**kwargs)


DEFAULT_CONFIG = EngineConfig()
