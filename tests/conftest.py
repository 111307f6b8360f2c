"""Pytest configuration and shared fixtures."""

import json
from datetime import date
from pathlib import Path

import pytest

from crater.models import CrateVersion, TestOutcome, Toolchain
from crater.sources import DependencyGraph, ResultStore, StaticReleaseIndex
from crater.utils.errors import UnknownCrate


# ============================================================================
# In-memory collaborators
# ============================================================================


class MemoryResultStore(ResultStore):
    """Result store over a dict of toolchain -> [(crate, outcome)]."""

    def __init__(self, outcomes: dict[Toolchain, list[tuple[CrateVersion, TestOutcome]]]):
        super().__init__()
        self.outcomes = outcomes
        self.queries: list[Toolchain] = []

    def _query(self, toolchain):
        self.queries.append(toolchain)
        if toolchain not in self.outcomes:
            return None
        return list(self.outcomes[toolchain])


class MemoryDependencyGraph(DependencyGraph):
    """Dependency graph over a dict of toolchain -> {crate: deps}."""

    def __init__(self, edges: dict[Toolchain, dict[CrateVersion, set[CrateVersion]]]):
        self.edges = edges
        self.lookups: list[tuple[CrateVersion, Toolchain]] = []

    def direct_dependencies(self, crate, as_of):
        self.lookups.append((crate, as_of))
        graph = self.edges.get(as_of, {})
        if crate not in graph:
            raise UnknownCrate(crate, as_of)
        return frozenset(graph[crate])


def crate(name: str, version: str = "1.0.0") -> CrateVersion:
    return CrateVersion(name, version)


# ============================================================================
# Toolchain Fixtures
# ============================================================================


@pytest.fixture
def stable() -> Toolchain:
    return Toolchain("stable", date(2016, 1, 21))


@pytest.fixture
def beta() -> Toolchain:
    return Toolchain("beta", date(2016, 1, 22))


@pytest.fixture
def nightly() -> Toolchain:
    return Toolchain("nightly", date(2016, 1, 25))


# ============================================================================
# Scenario Fixtures
# ============================================================================


@pytest.fixture
def scenario_outcomes(stable, beta) -> dict:
    """libA keeps working, libB breaks on its own, libC breaks through libB."""
    return {
        stable: [
            (crate("libA"), TestOutcome.TEST_SUCCEEDED),
            (crate("libB"), TestOutcome.TEST_SUCCEEDED),
            (crate("libC"), TestOutcome.TEST_SUCCEEDED),
        ],
        beta: [
            (crate("libA"), TestOutcome.TEST_SUCCEEDED),
            (crate("libB"), TestOutcome.BUILD_FAILED),
            (crate("libC"), TestOutcome.BUILD_FAILED),
        ],
    }


@pytest.fixture
def scenario_edges(beta) -> dict:
    return {
        beta: {
            crate("libA"): set(),
            crate("libB"): set(),
            crate("libC"): {crate("libB")},
        },
    }


@pytest.fixture
def scenario_store(scenario_outcomes) -> MemoryResultStore:
    return MemoryResultStore(scenario_outcomes).connect()


@pytest.fixture
def scenario_graph(scenario_edges) -> MemoryDependencyGraph:
    return MemoryDependencyGraph(scenario_edges)


@pytest.fixture
def release_index() -> StaticReleaseIndex:
    return StaticReleaseIndex({
        "stable": ["2015-12-10", "2016-01-21"],
        "beta": ["2016-01-15", "2016-01-22"],
        "nightly": ["2016-01-24", "2016-01-25", "2016-02-01"],
    })


# ============================================================================
# On-disk data
# ============================================================================


def write_results(root: Path, toolchain: str, records: list[tuple[str, str, str]]) -> None:
    path = root / "results" / f"{toolchain}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([
        {"crate": name, "version": version, "outcome": outcome}
        for name, version, outcome in records
    ]))


def write_graph(
    root: Path,
    toolchain: str,
    edges: dict[tuple[str, str], list[tuple[str, str]]],
) -> None:
    path = root / "graphs" / f"{toolchain}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([
        {
            "crate": name,
            "version": version,
            "dependencies": [{"crate": dep, "version": dep_version} for dep, dep_version in deps],
        }
        for (name, version), deps in edges.items()
    ]))


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """A data directory holding the stable -> beta scenario on disk."""
    root = tmp_path / "data"
    write_results(root, "stable-2016-01-21", [
        ("libA", "1.0.0", "test-succeeded"),
        ("libB", "1.0.0", "test-succeeded"),
        ("libC", "1.0.0", "test-succeeded"),
        ("libD", "0.2.0", "skipped"),
    ])
    write_results(root, "beta-2016-01-22", [
        ("libA", "1.0.0", "test-succeeded"),
        ("libB", "1.0.0", "build-failed"),
        ("libC", "1.0.0", "test-failed"),
        ("libD", "0.2.0", "test-succeeded"),
    ])
    write_graph(root, "beta-2016-01-22", {
        ("libA", "1.0.0"): [],
        ("libB", "1.0.0"): [],
        ("libC", "1.0.0"): [("libB", "1.0.0")],
    })
    return root


@pytest.fixture
def config_dir(tmp_path: Path, data_root: Path) -> Path:
    """A config directory pointing at data_root with static releases."""
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "defaults.yaml").write_text(
        f"""
store:
  path: {data_root}
releases:
  source: static
  static:
    stable: [2016-01-21]
    beta: [2016-01-22]
    nightly: [2016-01-25]
report:
  inspector_url: "https://inspector.example/?crate={{crate}}&version={{version}}&from={{from_toolchain}}&to={{to_toolchain}}"
logging:
  level: error
"""
    )
    return directory


def make_memory_store(outcomes: dict, connect: bool = True) -> MemoryResultStore:
    store = MemoryResultStore(outcomes)
    return store.connect() if connect else store

