"""Tests for the status classifier."""

import pytest

from crater.analysis import classify
from crater.models import Status, TestOutcome


class TestClassify:
    """classify is total and deterministic over every outcome."""

    @pytest.mark.parametrize("outcome", list(TestOutcome))
    def test_total(self, outcome):
        assert classify(outcome) in set(Status)
        assert classify(outcome) == classify(outcome)

    @pytest.mark.parametrize(
        "outcome",
        [TestOutcome.BUILD_FAILED, TestOutcome.TEST_FAILED, TestOutcome.ERROR],
    )
    def test_failures_are_not_working(self, outcome):
        assert classify(outcome) == Status.NOT_WORKING

    def test_test_success_is_working(self):
        assert classify(TestOutcome.TEST_SUCCEEDED) == Status.WORKING

    def test_build_success_without_tests_is_working(self):
        assert classify(TestOutcome.BUILD_SUCCEEDED) == Status.WORKING

    def test_skipped_is_neither(self):
        assert classify(TestOutcome.SKIPPED) == Status.SKIPPED
