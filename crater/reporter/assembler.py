"""Report assembly: snapshots and regression analysis packaged per request.

Store and graph reads are blocking, so they run on a worker pool owned by
the report being built, each under a timeout. A report is all-or-nothing:
the first DataUnavailable cancels the sibling work that has not finished
and aborts the whole report.

A read that is already executing in a worker thread cannot be interrupted.
When it times out the report fails immediately and the thread is left to
finish on its own; whatever it reads is discarded, and the process joins
the thread when it exits.
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import date
from typing import Any, Awaitable, Callable, Iterator, Optional, TypeVar

from crater.analysis import RegressionAnalysis, Snapshot, build_snapshot, detect_regressions
from crater.config.settings import CraterConfig, TimeoutConfig
from crater.models import (
    ComparisonReport,
    ComparisonRequest,
    CurrentReport,
    CurrentRequest,
    Report,
    ReportRequest,
    Toolchain,
    WeeklyReport,
    WeeklyRequest,
    format_date,
)
from crater.sources import DependencyGraph, ReleaseIndex, ResultStore
from crater.utils.errors import DataUnavailable
from crater.utils.logging import get_logger, set_report_context

logger = get_logger("reporter.assembler")

T = TypeVar("T")

# Enough for a weekly report's four snapshot queries to run at once
WORKER_THREADS = 4


@contextmanager
def worker_pool() -> Iterator[ThreadPoolExecutor]:
    """Thread pool for one report's blocking reads."""
    pool = ThreadPoolExecutor(max_workers=WORKER_THREADS, thread_name_prefix="crater-query")
    try:
        yield pool
    finally:
        # Queued reads are dropped; a thread stuck past its timeout is not joined
        pool.shutdown(wait=False, cancel_futures=True)


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """
    Await several operations concurrently.

    On the first failure (or if the caller is cancelled) every operation
    still in flight is cancelled and awaited before the error propagates, so
    nothing keeps running on behalf of an aborted report.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


class ReportAssembler:
    """
    Builds current, comparison and weekly reports.

    The assembler holds no per-report state, so concurrent builds on one
    instance do not interfere.
    """

    def __init__(
        self,
        store: ResultStore,
        graph: DependencyGraph,
        releases: ReleaseIndex,
        timeouts: Optional[TimeoutConfig] = None,
    ) -> None:
        """
        Initialize the assembler.

        Args:
            store: Connected result store
            graph: Dependency graph provider
            releases: Release index for resolving current toolchains
            timeouts: Query timeouts (defaults apply when omitted)
        """
        self.store = store
        self.graph = graph
        self.releases = releases
        self.timeouts = timeouts or TimeoutConfig()

    async def build(self, request: ReportRequest) -> Report:
        """Build the report a request asks for."""
        if isinstance(request, CurrentRequest):
            return await self.build_current_report(request.date)
        if isinstance(request, WeeklyRequest):
            return await self.build_weekly_report(request.date)
        if isinstance(request, ComparisonRequest):
            return await self.build_comparison_report(request.from_toolchain, request.to_toolchain)
        raise TypeError(f"Unsupported report request: {request!r}")

    async def build_current_report(self, as_of: date) -> CurrentReport:
        """
        Resolve the stable, beta and nightly toolchains current on a date.

        Raises:
            DataUnavailable: If a channel has no release on or before the date
        """
        set_report_context("current", format_date(as_of))
        current = await self.releases.resolve_all(as_of)
        report = CurrentReport(
            date=as_of,
            stable=current["stable"],
            beta=current["beta"],
            nightly=current["nightly"],
        )
        logger.info(
            "report_built",
            kind=report.kind.value,
            stable=str(report.stable),
            beta=str(report.beta),
            nightly=str(report.nightly),
        )
        return report

    async def build_comparison_report(
        self,
        from_toolchain: Toolchain,
        to_toolchain: Toolchain,
    ) -> ComparisonReport:
        """
        Compare two toolchains.

        Raises:
            DataUnavailable: If either snapshot or the dependency graph is unavailable
        """
        set_report_context("comparison", f"{from_toolchain}..{to_toolchain}")
        with worker_pool() as pool:
            report = await self._compare(from_toolchain, to_toolchain, pool)
        logger.info(
            "report_built",
            kind=report.kind.value,
            regressions=len(report.regressions),
            root_regressions=len(report.root_regressions),
        )
        return report

    async def build_weekly_report(self, as_of: date) -> WeeklyReport:
        """
        Build the weekly stable->beta and beta->nightly report for a date.

        Raises:
            DataUnavailable: If any toolchain or comparison data is unavailable
        """
        set_report_context("weekly", format_date(as_of))
        current = await self.build_current_report(as_of)
        set_report_context("weekly", format_date(as_of))

        with worker_pool() as pool:
            beta, nightly = await gather_or_cancel(
                self._compare(current.stable, current.beta, pool),
                self._compare(current.beta, current.nightly, pool),
            )

        report = WeeklyReport(date=as_of, current=current, beta=beta, nightly=nightly)
        logger.info(
            "report_built",
            kind=report.kind.value,
            beta_regressions=len(beta.regressions),
            nightly_regressions=len(nightly.regressions),
        )
        return report

    async def _compare(
        self,
        from_toolchain: Toolchain,
        to_toolchain: Toolchain,
        pool: ThreadPoolExecutor,
    ) -> ComparisonReport:
        # Both snapshots must be complete before detection starts
        from_snapshot, to_snapshot = await gather_or_cancel(
            self._snapshot(from_toolchain, pool),
            self._snapshot(to_toolchain, pool),
        )

        analysis: RegressionAnalysis = await self._run_blocking(
            pool,
            detect_regressions,
            from_snapshot,
            to_snapshot,
            self.graph,
            timeout=self.timeouts.graph_query,
            what=f"dependency analysis for {to_toolchain}",
            toolchain=to_toolchain,
        )

        return ComparisonReport(
            from_toolchain=from_toolchain,
            to_toolchain=to_toolchain,
            statuses=analysis.statuses,
            summary=analysis.summary,
            root_regressions=analysis.root_regressions,
            non_root_regressions=analysis.non_root_regressions,
            anomalies=tuple(str(a) for a in analysis.anomalies),
        )

    async def _snapshot(self, toolchain: Toolchain, pool: ThreadPoolExecutor) -> Snapshot:
        return await self._run_blocking(
            pool,
            build_snapshot,
            toolchain,
            self.store,
            timeout=self.timeouts.store_query,
            what=f"result query for {toolchain}",
            toolchain=toolchain,
        )

    @staticmethod
    async def _run_blocking(
        pool: ThreadPoolExecutor,
        fn: Callable[..., T],
        *args: Any,
        timeout: float,
        what: str,
        toolchain: Toolchain,
    ) -> T:
        loop = asyncio.get_running_loop()
        # Carry the report context into the worker's log events
        call = functools.partial(contextvars.copy_context().run, fn, *args)
        try:
            return await asyncio.wait_for(loop.run_in_executor(pool, call), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error("query_timeout", query=what, timeout=timeout)
            raise DataUnavailable(f"{what} timed out after {timeout}s", toolchain=toolchain) from e


async def build_report(config: CraterConfig, request: ReportRequest) -> Report:
    """
    Build one report with a store connection scoped to the build.

    Args:
        config: Loaded configuration
        request: Parsed report request

    Returns:
        The finished report
    """
    store = config.create_store()
    assembler = ReportAssembler(
        store=store,
        graph=config.create_graph(),
        releases=config.create_release_index(),
        timeouts=config.timeouts,
    )

    # Current reports only resolve release identifiers
    if isinstance(request, CurrentRequest):
        return await assembler.build(request)

    with store:
        return await assembler.build(request)
