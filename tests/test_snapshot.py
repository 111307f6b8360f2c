"""Tests for toolchain snapshots."""

import pytest

from conftest import crate, make_memory_store
from crater.analysis import build_snapshot
from crater.models import Status, StatusSummary, TestOutcome
from crater.utils.errors import DataUnavailable


class TestBuildSnapshot:
    """Tests for build_snapshot."""

    def test_counts_working_and_not_working(self, stable):
        store = make_memory_store({
            stable: [
                (crate("a"), TestOutcome.TEST_SUCCEEDED),
                (crate("b"), TestOutcome.TEST_FAILED),
                (crate("c"), TestOutcome.ERROR),
                (crate("d"), TestOutcome.SKIPPED),
            ],
        })

        snapshot = build_snapshot(stable, store)

        assert snapshot.toolchain == stable
        assert snapshot.summary == StatusSummary(working=1, not_working=2)
        assert snapshot.summary.regressed == 0
        assert snapshot.summary.fixed == 0

    def test_skipped_kept_in_raw_table_only(self, stable):
        store = make_memory_store({
            stable: [
                (crate("a"), TestOutcome.TEST_SUCCEEDED),
                (crate("d"), TestOutcome.SKIPPED),
            ],
        })

        snapshot = build_snapshot(stable, store)

        assert [r.crate for r in snapshot.results] == [crate("a"), crate("d")]
        assert snapshot.skipped == (crate("d"),)
        assert crate("d") not in snapshot.statuses
        assert snapshot.status_of(crate("a")) == Status.WORKING

    def test_one_status_per_crate(self, stable):
        store = make_memory_store({
            stable: [
                (crate("a"), TestOutcome.TEST_FAILED),
                (crate("a"), TestOutcome.TEST_SUCCEEDED),
            ],
        })

        snapshot = build_snapshot(stable, store)

        assert len(snapshot.results) == 1
        assert snapshot.status_of(crate("a")) == Status.WORKING

    def test_results_ordered_by_crate(self, stable):
        store = make_memory_store({
            stable: [
                (crate("zeta"), TestOutcome.TEST_SUCCEEDED),
                (crate("alpha"), TestOutcome.TEST_SUCCEEDED),
            ],
        })

        snapshot = build_snapshot(stable, store)

        assert [r.crate.name for r in snapshot.results] == ["alpha", "zeta"]

    def test_zero_crates_is_valid(self, stable):
        snapshot = build_snapshot(stable, make_memory_store({stable: []}))

        assert snapshot.results == ()
        assert snapshot.summary == StatusSummary()

    def test_missing_toolchain_raises(self, stable, beta):
        store = make_memory_store({stable: []})

        with pytest.raises(DataUnavailable) as exc_info:
            build_snapshot(beta, store)
        assert exc_info.value.toolchain == beta

    def test_disconnected_store_raises(self, stable):
        store = make_memory_store({stable: []}, connect=False)

        with pytest.raises(DataUnavailable):
            build_snapshot(stable, store)
