# fsmgraph/api.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Union

from fsmgraph.analysis.analyzer import AnalysisResult, analyze_graph
from fsmgraph.analysis.diagnostics import (
    DiagnosticReport,
    empty_report,
    format_parser_error,
    format_restore_error,
    generate_report,
)
from fsmgraph.core.config import DEFAULT_CONFIG, EngineConfig
from fsmgraph.core.errors import MachineNotLoadedError, ParserError, ParserErrorCode, SessionRestoreError
from fsmgraph.core.graph import MachineGraph
from fsmgraph.core.types import EventName
from fsmgraph.core.validations import DefinitionIssue, MachineParser, validate_definition
from fsmgraph.persistence.serializer import export_session, import_session
from fsmgraph.runtime.simulation import SimulationEngine, SimulationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Session:
    """
    Everything owned for one loaded machine. Replaced as a whole on every load
    and cleared as a whole on failure.
    """

    graph: MachineGraph
    simulator: SimulationEngine
    analysis: AnalysisResult


class StateMachineAPI:
    """
    Single entry point for callers such as an editor UI. Loads a definition,
    keeps the resulting graph, simulator and analysis together, and exposes
    simulation, analysis, diagnostics and session persistence.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        """
        :param config: Engine settings shared by parser and simulator.
        """
        self._config = config or DEFAULT_CONFIG
        self._parser = MachineParser(self._config)
        self._session: Optional[_Session] = None
        self._last_error: Optional[Union[ParserError, SessionRestoreError]] = None

    def load_machine(self, definition: Any) -> None:
        """
        Parse ``definition``, start a fresh simulation and analyze the graph.

        :raises ParserError: If the definition is rejected. The error is also
            kept for get_diagnostics and any previously loaded machine is dropped.
        """
        try:
            graph = self._parser.parse(definition)
            simulator = SimulationEngine(graph, self._config.guard_evaluator)
            session = _Session(graph=graph, simulator=simulator, analysis=analyze_graph(graph))
        except Exception as error:
            self._session = None
            if isinstance(error, ParserError):
                self._last_error = error
            else:
                self._last_error = ParserError(ParserErrorCode.INVALID_SCHEMA, str(error))
            logger.warning("Failed to load machine: %s", error)
            raise

        self._session = session
        self._last_error = None
        logger.info("Loaded machine '%s' with %d states", graph.id, len(graph))

    def analyze_machine(self) -> AnalysisResult:
        """Re-run analysis on the loaded graph; empty result if nothing is loaded."""
        session = self._session
        if session is None:
            return AnalysisResult()
        analysis = analyze_graph(session.graph)
        self._session = _Session(graph=session.graph, simulator=session.simulator, analysis=analysis)
        return analysis

    def step(self, event: EventName) -> SimulationState:
        return self._require_session().simulator.send(event)

    def reset(self) -> SimulationState:
        return self._require_session().simulator.reset()

    def time_travel(self, step_index: int) -> SimulationState:
        return self._require_session().simulator.time_travel(step_index)

    def get_diagnostics(self) -> DiagnosticReport:
        """
        Structured report of errors, warnings and metrics. A captured parser or
        session restore error takes precedence over a graph-based report.
        """
        error = self._last_error
        if isinstance(error, ParserError):
            return format_parser_error(error)
        if isinstance(error, SessionRestoreError):
            return format_restore_error(error)
        session = self._session
        if session is None:
            return empty_report()
        return generate_report(session.graph, session.analysis)

    def validate_definition(self, definition: Any) -> List[DefinitionIssue]:
        """Collect every reference problem in ``definition`` without loading it."""
        return validate_definition(definition)

    def export_session(self, now: Optional[datetime] = None) -> str:
        session = self._require_session()
        return export_session(session.graph, session.simulator, now)

    def load_session(self, document: Union[str, bytes]) -> SimulationState:
        """
        Load the machine embedded in a session document and restore its history.

        :raises SessionImportError: If the document is malformed.
        :raises ParserError: If the embedded definition is rejected.
        :raises SessionRestoreError: If the history does not fit the machine.
        """
        imported = import_session(document)
        self.load_machine(imported.machine)
        session = self._require_session()
        try:
            simulator = SimulationEngine.restore(session.graph, imported.history, self._config.guard_evaluator)
        except Exception as error:
            self._session = None
            if isinstance(error, SessionRestoreError):
                self._last_error = error
            logger.warning("Failed to restore session: %s", error)
            raise
        self._session = _Session(graph=session.graph, simulator=simulator, analysis=session.analysis)
        return simulator.get_state()

    def get_graph(self) -> Optional[MachineGraph]:
        session = self._session
        return session.graph if session else None

    def get_simulation_state(self) -> Optional[SimulationState]:
        session = self._session
        return session.simulator.get_state() if session else None

    def get_available_events(self) -> List[EventName]:
        session = self._session
        return session.simulator.get_available_events() if session else []

    def _require_session(self) -> _Session:
        session = self._session
        if session is None:
            raise MachineNotLoadedError("Machine not loaded. Call load_machine first.")
        return session
