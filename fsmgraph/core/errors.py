# fsmgraph/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from enum import Enum
from typing import Iterable, Optional, Tuple


class FSMError(Exception):
    """
    Base exception class for errors within the state machine engine.
    """


class ParserErrorCode(Enum):
    INVALID_SCHEMA = "INVALID_SCHEMA"
    MISSING_INITIAL = "MISSING_INITIAL"
    INVALID_REFERENCE = "INVALID_REFERENCE"


class ParserError(FSMError):
    """
    Raised when a machine definition cannot be turned into a graph. Carries a
    machine-readable code and the path of the offending element inside the
    source definition.
    """

    def __init__(self, code: ParserErrorCode, details: str, path: Optional[Iterable[str]] = None) -> None:
        super().__init__(details)
        self.code = code
        self.details = details
        self.path: Optional[Tuple[str, ...]] = tuple(path) if path is not None else None


class DuplicateTransitionError(ParserError):
    """
    Raised when a node rejects a second transition for the same event.
    """

    def __init__(self, state_id: str, event: str) -> None:
        super().__init__(
            ParserErrorCode.INVALID_SCHEMA,
            f"State '{state_id}' defines more than one transition for event '{event}'.",
            ("states", state_id, "on", event),
        )
        self.state_id = state_id
        self.event = event


class GraphFrozenError(FSMError):
    """
    Raised when a state node is modified after its graph has been built.
    """


class MachineNotLoadedError(FSMError):
    """
    Raised when a simulation operation is requested before a machine was loaded.
    """


class SessionImportError(FSMError):
    """
    Raised when a session document is malformed or structurally incomplete.
    """


class SessionRestoreError(FSMError):
    """
    Raised when a restored simulation history does not fit the machine graph.
    """
