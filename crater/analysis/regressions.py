"""Regression detection and root-cause partitioning.

A regression is a crate that works on the "from" toolchain and does not work
on the "to" toolchain. A regression is *root* unless one of its transitive
dependencies, resolved as of the "to" toolchain, is itself a regression.

Dependencies that sit on a cycle with the crate being classified do not
count: a cycle cannot say which of its members broke first, so every
member is judged only by regressed dependencies reachable from the cycle
that do not lead back into it.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Optional

from crater.analysis.snapshot import Snapshot
from crater.models import (
    Change,
    CrateComparison,
    CrateVersion,
    Regression,
    Status,
    StatusSummary,
    Toolchain,
)
from crater.sources.base import DependencyGraph
from crater.utils.errors import CraterError, MalformedGraphData, UnknownCrate
from crater.utils.logging import get_logger

logger = get_logger("analysis.regressions")


@dataclass(frozen=True)
class RegressionAnalysis:
    """
    Outcome of comparing two snapshots.

    Attributes:
        from_toolchain: Baseline toolchain
        to_toolchain: Toolchain under test
        statuses: Per-crate comparison for crates classified on both sides
        summary: Unchanged working / unchanged not working / regressed / fixed
        regressions: Every regression, ordered by crate
        root_regressions: Regressions with no regressed dependency
        non_root_regressions: Regressions explained by a regressed dependency
        anomalies: Recoverable graph errors met while classifying
    """

    from_toolchain: Toolchain
    to_toolchain: Toolchain
    statuses: tuple[CrateComparison, ...]
    summary: StatusSummary
    regressions: tuple[Regression, ...]
    root_regressions: tuple[Regression, ...]
    non_root_regressions: tuple[Regression, ...]
    anomalies: tuple[CraterError, ...] = ()


class DependencyWalker:
    """
    Walks a dependency graph as resolved for one toolchain.

    Traversal uses an explicit worklist and visited set, so it terminates on
    cyclic data and is not bounded by the interpreter's recursion limit.
    Direct edges and closures are memoized per walker.
    """

    def __init__(self, graph: DependencyGraph, toolchain: Toolchain) -> None:
        self.graph = graph
        self.toolchain = toolchain
        self.unknown: set[CrateVersion] = set()
        self.anomalies: list[CraterError] = []
        self._edges: dict[CrateVersion, frozenset[CrateVersion]] = {}
        self._closures: dict[CrateVersion, frozenset[CrateVersion]] = {}

    def direct(self, crate: CrateVersion) -> frozenset[CrateVersion]:
        """Direct dependencies; a crate the graph does not know has none."""
        if crate not in self._edges:
            try:
                deps = frozenset(self.graph.direct_dependencies(crate, self.toolchain))
            except UnknownCrate as e:
                logger.warning("unknown_crate", crate=str(crate), toolchain=str(self.toolchain))
                self.unknown.add(crate)
                self.anomalies.append(e)
                deps = frozenset()
            self._edges[crate] = deps
        return self._edges[crate]

    def closure(self, crate: CrateVersion) -> frozenset[CrateVersion]:
        """
        Every crate reachable from ``crate`` through one or more edges.

        The crate itself is part of its closure only when it lies on a cycle.
        """
        if crate in self._closures:
            return self._closures[crate]

        visited: set[CrateVersion] = set()
        worklist = list(self.direct(crate))
        while worklist:
            dep = worklist.pop()
            if dep in visited:
                continue
            visited.add(dep)
            worklist.extend(d for d in self.direct(dep) if d not in visited)

        result = frozenset(visited)
        self._closures[crate] = result
        return result

    def cycle_path(self, crate: CrateVersion) -> list[CrateVersion]:
        """Shortest path from ``crate`` back to itself, or [] if there is none."""
        parents: dict[CrateVersion, Optional[CrateVersion]] = {}
        queue: deque[CrateVersion] = deque()
        for dep in sorted(self.direct(crate)):
            if dep == crate:
                return [crate, crate]
            if dep not in parents:
                parents[dep] = None
                queue.append(dep)

        while queue:
            node = queue.popleft()
            for dep in sorted(self.direct(node)):
                if dep == crate:
                    path = [node]
                    while parents[path[-1]] is not None:
                        path.append(parents[path[-1]])
                    return [crate, *reversed(path), crate]
                if dep not in parents:
                    parents[dep] = node
                    queue.append(dep)
        return []

    def culprits(
        self,
        crate: CrateVersion,
        regressed: frozenset[CrateVersion],
    ) -> tuple[CrateVersion, ...]:
        """
        Regressed dependencies that explain a regression of ``crate``.

        Empty when the crate is unknown to the graph, has no dependencies, or
        reaches regressed crates only through a cycle back to itself.
        """
        self.direct(crate)
        if crate in self.unknown:
            return ()

        reachable = self.closure(crate)
        if crate in reachable:
            path = self.cycle_path(crate)
            anomaly = MalformedGraphData(path, self.toolchain)
            logger.warning(
                "dependency_cycle",
                crate=str(crate),
                toolchain=str(self.toolchain),
                path=[str(c) for c in path],
            )
            self.anomalies.append(anomaly)

        return tuple(
            sorted(
                dep
                for dep in reachable & regressed
                if dep != crate and crate not in self.closure(dep)
            )
        )


def compare_statuses(from_snapshot: Snapshot, to_snapshot: Snapshot) -> tuple[CrateComparison, ...]:
    """Pair up statuses for crates classified on both toolchains."""
    common = set(from_snapshot.statuses) & set(to_snapshot.statuses)
    return tuple(
        CrateComparison(
            crate=crate,
            from_status=from_snapshot.statuses[crate],
            to_status=to_snapshot.statuses[crate],
        )
        for crate in sorted(common)
    )


def summarize(statuses: Iterable[CrateComparison]) -> StatusSummary:
    """Count each crate once: unchanged working, unchanged broken, regressed or fixed."""
    working = not_working = regressed = fixed = 0
    for comparison in statuses:
        change = comparison.change
        if change == Change.REGRESSED:
            regressed += 1
        elif change == Change.FIXED:
            fixed += 1
        elif comparison.to_status == Status.WORKING:
            working += 1
        else:
            not_working += 1
    return StatusSummary(working=working, not_working=not_working, regressed=regressed, fixed=fixed)


def detect_regressions(
    from_snapshot: Snapshot,
    to_snapshot: Snapshot,
    graph: DependencyGraph,
) -> RegressionAnalysis:
    """
    Find regressions between two snapshots and split them into root and non-root.

    Args:
        from_snapshot: Baseline snapshot
        to_snapshot: Snapshot of the toolchain under test
        graph: Dependency graph, consulted as of the "to" toolchain only

    Returns:
        The regression analysis

    Raises:
        DataUnavailable: If the dependency graph cannot be read
    """
    statuses = compare_statuses(from_snapshot, to_snapshot)
    summary = summarize(statuses)

    # The full regression set is known before any crate is classified
    regressed = frozenset(s.crate for s in statuses if s.change == Change.REGRESSED)

    walker = DependencyWalker(graph, to_snapshot.toolchain)
    regressions = []
    for crate in sorted(regressed):
        culprits = walker.culprits(crate, regressed)
        regressions.append(
            Regression(
                crate=crate,
                from_toolchain=from_snapshot.toolchain,
                to_toolchain=to_snapshot.toolchain,
                root=not culprits,
                culprits=culprits,
            )
        )

    root = tuple(r for r in regressions if r.root)
    non_root = tuple(r for r in regressions if not r.root)
    anomalies = tuple(sorted(walker.anomalies, key=str))

    logger.info(
        "regressions_detected",
        from_toolchain=str(from_snapshot.toolchain),
        to_toolchain=str(to_snapshot.toolchain),
        compared=len(statuses),
        regressed=summary.regressed,
        fixed=summary.fixed,
        root=len(root),
        non_root=len(non_root),
        anomalies=len(anomalies),
    )

    return RegressionAnalysis(
        from_toolchain=from_snapshot.toolchain,
        to_toolchain=to_snapshot.toolchain,
        statuses=statuses,
        summary=summary,
        regressions=tuple(regressions),
        root_regressions=root,
        non_root_regressions=non_root,
        anomalies=anomalies,
    )
