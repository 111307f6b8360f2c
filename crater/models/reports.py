"""Report values and report requests.

Both are tagged unions: every variant carries a ``kind`` so consumers can
dispatch on it exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Sequence, Union

from crater.models.results import CrateComparison, Regression, StatusSummary
from crater.models.toolchain import Toolchain, format_date, parse_date, parse_toolchain
from crater.utils.result import Err, Ok, RequestError, Result


class ReportKind(Enum):
    """Report variants."""

    CURRENT = "current"
    COMPARISON = "comparison"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class CurrentReport:
    """Toolchains that were current on a given date."""

    date: date
    stable: Toolchain
    beta: Toolchain
    nightly: Toolchain
    kind: ReportKind = field(default=ReportKind.CURRENT, init=False)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "date": format_date(self.date),
            "stable": str(self.stable),
            "beta": str(self.beta),
            "nightly": str(self.nightly),
        }


@dataclass(frozen=True)
class ComparisonReport:
    """
    Regressions between two toolchains.

    Attributes:
        from_toolchain: Baseline toolchain
        to_toolchain: Toolchain under test
        statuses: Per-crate comparison table for crates tested on both sides
        summary: Unchanged/regressed/fixed counts over ``statuses``
        root_regressions: Regressions not explained by a dependency
        non_root_regressions: Regressions explained by a regressed dependency
        anomalies: Recoverable graph problems met while classifying
    """

    from_toolchain: Toolchain
    to_toolchain: Toolchain
    statuses: tuple[CrateComparison, ...]
    summary: StatusSummary
    root_regressions: tuple[Regression, ...]
    non_root_regressions: tuple[Regression, ...]
    anomalies: tuple[str, ...] = ()
    kind: ReportKind = field(default=ReportKind.COMPARISON, init=False)

    @property
    def regressions(self) -> tuple[Regression, ...]:
        """All regressions, ordered by crate."""
        return tuple(
            sorted(
                self.root_regressions + self.non_root_regressions,
                key=lambda r: r.crate,
            )
        )

    def to_dict(self, inspector_url: Optional[str] = None) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "from_toolchain": str(self.from_toolchain),
            "to_toolchain": str(self.to_toolchain),
            "crates_tested": len(self.statuses),
            "summary": self.summary.to_dict(),
            "regressions": [r.to_dict(inspector_url) for r in self.regressions],
            "root_regressions": [r.to_dict(inspector_url) for r in self.root_regressions],
            "non_root_regressions": [
                r.to_dict(inspector_url) for r in self.non_root_regressions
            ],
            "statuses": [s.to_dict() for s in self.statuses],
            "anomalies": list(self.anomalies),
        }


@dataclass(frozen=True)
class WeeklyReport:
    """Current releases plus stable->beta and beta->nightly comparisons."""

    date: date
    current: CurrentReport
    beta: ComparisonReport
    nightly: ComparisonReport
    kind: ReportKind = field(default=ReportKind.WEEKLY, init=False)

    def to_dict(self, inspector_url: Optional[str] = None) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "date": format_date(self.date),
            "current": self.current.to_dict(),
            "beta": self.beta.to_dict(inspector_url),
            "nightly": self.nightly.to_dict(inspector_url),
        }


Report = Union[CurrentReport, ComparisonReport, WeeklyReport]


@dataclass(frozen=True)
class CurrentRequest:
    date: date
    kind: ReportKind = field(default=ReportKind.CURRENT, init=False)


@dataclass(frozen=True)
class WeeklyRequest:
    date: date
    kind: ReportKind = field(default=ReportKind.WEEKLY, init=False)


@dataclass(frozen=True)
class ComparisonRequest:
    from_toolchain: Toolchain
    to_toolchain: Toolchain
    kind: ReportKind = field(default=ReportKind.COMPARISON, init=False)


ReportRequest = Union[CurrentRequest, WeeklyRequest, ComparisonRequest]


def parse_report_request(
    args: Sequence[str],
    today: date,
) -> Result[ReportRequest, RequestError]:
    """
    Parse "current [DATE]", "weekly [DATE]" or "comparison FROM TO".

    Args:
        args: Command words, report kind first
        today: Date used when a dated request omits its date

    Returns:
        Result with the parsed request or the reason it was rejected
    """
    if not args:
        return Err(RequestError(argument="kind", message="missing report kind"))

    kind, rest = args[0], list(args[1:])

    if kind in (ReportKind.CURRENT.value, ReportKind.WEEKLY.value):
        if len(rest) > 1:
            return Err(RequestError(argument=kind, message="expected at most one DATE"))
        request_date = today
        if rest:
            try:
                request_date = parse_date(rest[0])
            except ValueError:
                return Err(RequestError(argument="date", message=f"not a YYYY-MM-DD date: {rest[0]}"))
        if kind == ReportKind.CURRENT.value:
            return Ok(CurrentRequest(date=request_date))
        return Ok(WeeklyRequest(date=request_date))

    if kind == ReportKind.COMPARISON.value:
        if len(rest) != 2:
            return Err(RequestError(argument=kind, message="expected FROM and TO toolchains"))
        try:
            from_toolchain = parse_toolchain(rest[0])
            to_toolchain = parse_toolchain(rest[1])
        except ValueError as e:
            return Err(RequestError(argument="toolchain", message=str(e)))
        return Ok(ComparisonRequest(from_toolchain=from_toolchain, to_toolchain=to_toolchain))

    return Err(RequestError(argument="kind", message=f"unknown report kind: {kind}"))
