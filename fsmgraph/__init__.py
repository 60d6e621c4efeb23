"""fsmgraph: finite state machine graph engine

Turns a declarative, JSON-shaped machine definition into a validated directed
graph, analyzes it, simulates it event by event, and persists sessions.

Responsibilities:
    - Definition parsing and validation
    - Reachability, dead-end and cycle analysis
    - Deterministic simulation with history and time travel
    - Diagnostics reporting
    - Session serialization

Interactions:
    - Editor/UI code through StateMachineAPI
    - Persistence code through session documents (JSON text)
    - Logging system for diagnostics

Cross-cutting Concerns:
    Thread Safety:
        - Not thread-safe; one caller owns an API instance at a time
        - Snapshots returned to callers are immutable

    Error Handling:
        - Structured error hierarchy rooted at FSMError
        - Simulation failures are logged values, never raised

    Logging:
        - Standard library logging, one logger per module
        - No handlers configured by the package
"""

from fsmgraph.analysis import AnalysisResult, DiagnosticReport, analyze_graph, generate_report
from fsmgraph.api import StateMachineAPI
from fsmgraph.core import EngineConfig, FSMError, MachineGraph, ParserError, parse_machine
from fsmgraph.persistence import export_session, graph_to_json, import_session
from fsmgraph.runtime import SimulationEngine, SimulationState

__version__ = "0.1.0"

__all__ = [
    "AnalysisResult",
    "DiagnosticReport",
    "EngineConfig",
    "FSMError",
    "MachineGraph",
    "ParserError",
    "SimulationEngine",
    "SimulationState",
    "StateMachineAPI",
    "analyze_graph",
    "export_session",
    "generate_report",
    "graph_to_json",
    "import_session",
    "parse_machine",
]
