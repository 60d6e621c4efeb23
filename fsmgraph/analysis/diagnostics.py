# fsmgraph/analysis/diagnostics.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from fsmgraph.analysis.analyzer import AnalysisResult
from fsmgraph.core.errors import ParserError, SessionRestoreError
from fsmgraph.core.graph import MachineGraph


class DiagnosticSeverity(Enum):
    """
    Severity levels for diagnostic issues, most severe first.
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ReportStatus(Enum):
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class DiagnosticIssue:
    """
    One finding about a machine.

    Attributes:
        code: Machine-readable issue code, e.g. ``DEAD_END``.
        severity: How serious the finding is.
        message: Human-readable description.
        path: Location of the offending element in the source definition.
        related_ids: Graph states involved.
    """

    code: str
    severity: DiagnosticSeverity
    message: str
    path: Optional[Tuple[str, ...]] = None
    related_ids: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "severity": self.severity.value, "message": self.message}
        if self.path is not None:
            data["path"] = list(self.path)
        if self.related_ids is not None:
            data["relatedIds"] = list(self.related_ids)
        return data


@dataclass(frozen=True)
class DiagnosticMetrics:
    total_states: int = 0
    total_transitions: int = 0
    # Number of detected cycles; a rough proxy, not McCabe complexity.
    cyclomatic_complexity: int = 0


@dataclass(frozen=True)
class DiagnosticReport:
    status: ReportStatus
    issues: Tuple[DiagnosticIssue, ...]
    summary: str
    metrics: DiagnosticMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": self.summary,
            "metrics": {
                "totalStates": self.metrics.total_states,
                "totalTransitions": self.metrics.total_transitions,
                "cyclomaticComplexity": self.metrics.cyclomatic_complexity,
            },
        }


def generate_report(graph: MachineGraph, analysis: AnalysisResult) -> DiagnosticReport:
    """
    Turn analysis results into a structured report: one warning per orphan, one
    warning per dead end, one info per cycle. Issues follow state declaration
    order so the same graph always yields the same report.
    """
    issues = []

    for state_id in graph.state_ids:
        if state_id in analysis.orphans:
            issues.append(
                DiagnosticIssue(
                    code="UNREACHABLE_STATE",
                    severity=DiagnosticSeverity.WARNING,
                    message=f"State '{state_id}' is not reachable from the initial state.",
                    path=("states", state_id),
                    related_ids=(state_id,),
                )
            )

    for state_id in graph.state_ids:
        if state_id in analysis.dead_ends:
            issues.append(
                DiagnosticIssue(
                    code="DEAD_END",
                    severity=DiagnosticSeverity.WARNING,
                    message=f"State '{state_id}' is a dead end (not final, no transitions).",
                    path=("states", state_id),
                    related_ids=(state_id,),
                )
            )

    for cycle in analysis.cycles:
        issues.append(
            DiagnosticIssue(
                code="CYCLE_DETECTED",
                severity=DiagnosticSeverity.INFO,
                message=f"Cycle detected: {' -> '.join(cycle.path)}",
                related_ids=tuple(cycle.path),
            )
        )

    status = _overall_status(issues)

    summary_lines = [f"Analysis Complete: {status.value.upper()}", f"Found {len(issues)} issues."]
    if analysis.orphans:
        summary_lines.append(f"- {len(analysis.orphans)} unreachable states.")
    if analysis.dead_ends:
        summary_lines.append(f"- {len(analysis.dead_ends)} dead-end states.")
    if analysis.cycles:
        summary_lines.append(f"- {len(analysis.cycles)} cycles detected.")

    return DiagnosticReport(
        status=status,
        issues=tuple(issues),
        summary="\n".join(summary_lines),
        metrics=DiagnosticMetrics(
            total_states=len(graph),
            total_transitions=graph.transition_count(),
            cyclomatic_complexity=len(analysis.cycles),
        ),
    )


def format_parser_error(error: ParserError) -> DiagnosticReport:
    """
    Report shape for a definition that never became a graph: a single error
    issue and zero metrics.
    """
    issue = DiagnosticIssue(
        code=error.code.value,
        severity=DiagnosticSeverity.ERROR,
        message=error.details,
        path=error.path,
    )
    return DiagnosticReport(
        status=ReportStatus.ERROR,
        issues=(issue,),
        summary=f"Fatal Error: {error.details}",
        metrics=DiagnosticMetrics(),
    )


def format_restore_error(error: SessionRestoreError) -> DiagnosticReport:
    """
    Report shape for a session whose machine parsed but whose history did not
    fit it. The machine is dropped with the history, so metrics stay zero.
    """
    issue = DiagnosticIssue(code="SESSION_RESTORE", severity=DiagnosticSeverity.ERROR, message=str(error))
    return DiagnosticReport(
        status=ReportStatus.ERROR,
        issues=(issue,),
        summary=f"Fatal Error: {error}",
        metrics=DiagnosticMetrics(),
    )


def empty_report() -> DiagnosticReport:
    return DiagnosticReport(status=ReportStatus.ERROR, issues=(), summary="No machine loaded", metrics=DiagnosticMetrics())


def _overall_status(issues) -> ReportStatus:
    severities = {issue.severity for issue in issues}
    if DiagnosticSeverity.ERROR in severities:
        return ReportStatus.ERROR
    if DiagnosticSeverity.WARNING in severities:
        return ReportStatus.WARNING
    return ReportStatus.VALID
