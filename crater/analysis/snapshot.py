"""Per-toolchain status snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from crater.analysis.classifier import classify
from crater.models import CrateResult, CrateVersion, Status, StatusSummary, Toolchain
from crater.sources.base import ResultStore
from crater.utils.errors import DataUnavailable
from crater.utils.logging import get_logger

logger = get_logger("analysis.snapshot")


@dataclass(frozen=True)
class Snapshot:
    """
    Status of every crate tested on one toolchain.

    Attributes:
        toolchain: The toolchain the snapshot describes
        results: Raw table, including skipped crates, ordered by crate
        statuses: Crate -> status for crates that were not skipped
        summary: Working / not working counts
    """

    toolchain: Toolchain
    results: tuple[CrateResult, ...]
    statuses: Mapping[CrateVersion, Status]
    summary: StatusSummary

    @property
    def skipped(self) -> tuple[CrateVersion, ...]:
        return tuple(r.crate for r in self.results if r.status == Status.SKIPPED)

    def status_of(self, crate: CrateVersion) -> Status | None:
        return self.statuses.get(crate)


def build_snapshot(toolchain: Toolchain, store: ResultStore) -> Snapshot:
    """
    Query and classify every outcome recorded for a toolchain.

    Args:
        toolchain: Toolchain to snapshot
        store: Connected result store

    Returns:
        The toolchain's snapshot

    Raises:
        DataUnavailable: If the store has no results for the toolchain
    """
    records = store.query_outcomes(toolchain)
    if records is None:
        raise DataUnavailable(f"no results recorded for {toolchain}", toolchain=toolchain)

    rows: dict[CrateVersion, CrateResult] = {}
    for crate, outcome in records:
        if crate in rows:
            # A snapshot holds one status per crate; the last record wins
            logger.warning(
                "duplicate_outcome",
                toolchain=str(toolchain),
                crate=str(crate),
                kept=outcome.value,
                dropped=rows[crate].outcome.value,
            )
        rows[crate] = CrateResult(crate=crate, outcome=outcome, status=classify(outcome))

    results = tuple(rows[c] for c in sorted(rows))
    statuses = {r.crate: r.status for r in results if r.status != Status.SKIPPED}
    summary = StatusSummary(
        working=sum(1 for s in statuses.values() if s == Status.WORKING),
        not_working=sum(1 for s in statuses.values() if s == Status.NOT_WORKING),
    )

    logger.info(
        "snapshot_built",
        toolchain=str(toolchain),
        crates=len(results),
        working=summary.working,
        not_working=summary.not_working,
        skipped=len(results) - len(statuses),
    )
    return Snapshot(
        toolchain=toolchain,
        results=results,
        statuses=MappingProxyType(statuses),
        summary=summary,
    )
