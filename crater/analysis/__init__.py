"""Classification, snapshots and regression detection."""

from crater.analysis.classifier import classify
from crater.analysis.regressions import (
    DependencyWalker,
    RegressionAnalysis,
    compare_statuses,
    detect_regressions,
    summarize,
)
from crater.analysis.snapshot import Snapshot, build_snapshot

__all__ = [
    # Classifier
    "classify",
    # Snapshots
    "Snapshot",
    "build_snapshot",
    # Regressions
    "DependencyWalker",
    "RegressionAnalysis",
    "compare_statuses",
    "detect_regressions",
    "summarize",
]
