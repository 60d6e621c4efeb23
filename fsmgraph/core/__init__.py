"""
Core package: machine model, configuration and definition parsing.
"""

# Import order matters to avoid circular dependencies
from .types import DuplicatePolicy, EventName, StateID, StateKind
from .errors import (
    DuplicateTransitionError,
    FSMError,
    GraphFrozenError,
    MachineNotLoadedError,
    ParserError,
    ParserErrorCode,
    SessionImportError,
    SessionRestoreError,
)
from .transitions import Transition
from .states import StateNode
from .graph import MachineGraph
from .guards import GuardEvaluator, NamedGuards, allow_all_guards
from .config import DEFAULT_CONFIG, EngineConfig
from .validations import DefinitionIssue, MachineParser, parse_machine, validate_definition

__all__ = [
    # Model
    "StateID",
    "EventName",
    "StateKind",
    "DuplicatePolicy",
    "Transition",
    "StateNode",
    "MachineGraph",
    # Errors
    "FSMError",
    "ParserError",
    "ParserErrorCode",
    "DuplicateTransitionError",
    "GraphFrozenError",
    "MachineNotLoadedError",
    "SessionImportError",
    "SessionRestoreError",
    # Guards and configuration
    "GuardEvaluator",
    "NamedGuards",
    "allow_all_guards",
    "EngineConfig",
    "DEFAULT_CONFIG",
    # Parsing
    "MachineParser",
    "parse_machine",
    "DefinitionIssue",
    "validate_definition",
]
