# fsmgraph/core/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from enum import Enum
from typing import Tuple

StateID = str
EventName = str
JsonPath = Tuple[str, ...]


class StateKind(Enum):
    """
    Role of a state node inside a flat machine graph.
    """

    INITIAL = "initial"
    FINAL = "final"
    DEFAULT = "default"


class DuplicatePolicy(Enum):
    """
    What a node's transition table does when a second transition is inserted
    for an event it already handles.
    """

    OVERWRITE = "overwrite"  # last write wins
    REJECT = "reject"  # raise DuplicateTransitionError
