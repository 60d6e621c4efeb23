"""
Analysis package: static graph analysis and diagnostics reporting.
"""

from .analyzer import AnalysisResult, Cycle, analyze_graph
from .diagnostics import (
    DiagnosticIssue,
    DiagnosticMetrics,
    DiagnosticReport,
    DiagnosticSeverity,
    ReportStatus,
    format_parser_error,
    generate_report,
)

__all__ = [
    "AnalysisResult",
    "Cycle",
    "analyze_graph",
    "DiagnosticIssue",
    "DiagnosticMetrics",
    "DiagnosticReport",
    "DiagnosticSeverity",
    "ReportStatus",
    "format_parser_error",
    "generate_report",
]
