"""Data models for crater-report."""

from crater.models.reports import (
    ComparisonReport,
    ComparisonRequest,
    CurrentReport,
    CurrentRequest,
    Report,
    ReportKind,
    ReportRequest,
    WeeklyReport,
    WeeklyRequest,
    parse_report_request,
)
from crater.models.results import (
    Change,
    CrateComparison,
    CrateResult,
    Regression,
    Status,
    StatusSummary,
    TestOutcome,
)
from crater.models.toolchain import (
    CrateVersion,
    Toolchain,
    format_date,
    parse_date,
    parse_toolchain,
)

__all__ = [
    # Identifiers
    "Toolchain",
    "CrateVersion",
    "parse_toolchain",
    "parse_date",
    "format_date",
    # Result models
    "TestOutcome",
    "Status",
    "Change",
    "CrateResult",
    "CrateComparison",
    "StatusSummary",
    "Regression",
    # Reports
    "ReportKind",
    "CurrentReport",
    "ComparisonReport",
    "WeeklyReport",
    "Report",
    "CurrentRequest",
    "WeeklyRequest",
    "ComparisonRequest",
    "ReportRequest",
    "parse_report_request",
]
