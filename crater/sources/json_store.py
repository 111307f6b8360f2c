"""JSON directory backed result store and dependency graph.

Layout under the data root::

    results/<toolchain>.json   [{"crate": "...", "version": "...", "outcome": "test-failed"}, ...]
    graphs/<toolchain>.json    [{"crate": "...", "version": "...", "dependencies": [{"crate": "...", "version": "..."}]}, ...]

A toolchain with results but no graph file cannot be analysed: regressions
would all look like root regressions, so the missing graph is an error.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Optional

from crater.models import CrateVersion, TestOutcome, Toolchain
from crater.sources.base import DependencyGraph, OutcomeRecord, ResultStore
from crater.utils.errors import DataUnavailable, UnknownCrate
from crater.utils.logging import get_logger

logger = get_logger("sources.json_store")

RESULTS_DIR = "results"
GRAPHS_DIR = "graphs"


def _read_json(path: Path, toolchain: Toolchain) -> Any:
    """Read a JSON file, turning any read or parse failure into DataUnavailable."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error("data_file_unreadable", path=str(path), error=str(e))
        raise DataUnavailable(f"cannot read {path}: {e}", toolchain=toolchain) from e


class JsonResultStore(ResultStore):
    """Result store reading one JSON file of outcomes per toolchain."""

    def __init__(
        self,
        root: str | Path,
        credentials: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            root: Data root containing the results directory
            credentials: Opaque connection settings
        """
        super().__init__(credentials)
        self.root = Path(root)
        self.results_dir = self.root / RESULTS_DIR

    def _open(self) -> None:
        if not self.root.is_dir():
            raise DataUnavailable(f"result store root does not exist: {self.root}")

    def _query(self, toolchain: Toolchain) -> Optional[list[OutcomeRecord]]:
        path = self.results_dir / f"{toolchain}.json"
        if not path.exists():
            logger.info("no_results_recorded", toolchain=str(toolchain))
            return None

        data = _read_json(path, toolchain)
        if not isinstance(data, list):
            raise DataUnavailable(f"{path} does not hold a list of outcomes", toolchain=toolchain)

        records: list[OutcomeRecord] = []
        for entry in data:
            try:
                records.append((CrateVersion.from_dict(entry), TestOutcome(entry["outcome"])))
            except (KeyError, TypeError, ValueError) as e:
                raise DataUnavailable(
                    f"malformed outcome record in {path}: {entry!r}",
                    toolchain=toolchain,
                ) from e

        logger.debug("outcomes_loaded", toolchain=str(toolchain), count=len(records))
        return records


class JsonDependencyGraph(DependencyGraph):
    """Dependency graph reading one JSON adjacency file per toolchain."""

    def __init__(self, root: str | Path) -> None:
        """
        Initialize the graph.

        Args:
            root: Data root containing the graphs directory
        """
        self.root = Path(root)
        self.graphs_dir = self.root / GRAPHS_DIR
        self._graphs: dict[Toolchain, dict[CrateVersion, frozenset[CrateVersion]]] = {}
        self._lock = threading.Lock()

    def direct_dependencies(
        self,
        crate: CrateVersion,
        as_of: Toolchain,
    ) -> frozenset[CrateVersion]:
        graph = self._load(as_of)
        if crate not in graph:
            raise UnknownCrate(crate, as_of)
        return graph[crate]

    def _load(self, toolchain: Toolchain) -> dict[CrateVersion, frozenset[CrateVersion]]:
        with self._lock:
            if toolchain in self._graphs:
                return self._graphs[toolchain]

            path = self.graphs_dir / f"{toolchain}.json"
            if not path.exists():
                logger.error("dependency_graph_missing", toolchain=str(toolchain), path=str(path))
                raise DataUnavailable(f"no dependency graph recorded at {path}", toolchain=toolchain)

            data = _read_json(path, toolchain)
            if not isinstance(data, list):
                raise DataUnavailable(f"{path} does not hold a list of crate entries", toolchain=toolchain)

            graph: dict[CrateVersion, frozenset[CrateVersion]] = {}
            for entry in data:
                try:
                    crate = CrateVersion.from_dict(entry)
                    graph[crate] = frozenset(
                        CrateVersion.from_dict(dep) for dep in entry.get("dependencies", [])
                    )
                except (AttributeError, KeyError, TypeError) as e:
                    raise DataUnavailable(
                        f"malformed dependency entry in {path}: {entry!r}",
                        toolchain=toolchain,
                    ) from e

            self._graphs[toolchain] = graph
            logger.debug("dependency_graph_loaded", toolchain=str(toolchain), crates=len(graph))
            return graph
