"""Maps raw test outcomes to statuses."""

from __future__ import annotations

from crater.models import Status, TestOutcome

# build-succeeded means the build passed and no test phase failed after it
_STATUS_BY_OUTCOME: dict[TestOutcome, Status] = {
    TestOutcome.BUILD_SUCCEEDED: Status.WORKING,
    TestOutcome.TEST_SUCCEEDED: Status.WORKING,
    TestOutcome.BUILD_FAILED: Status.NOT_WORKING,
    TestOutcome.TEST_FAILED: Status.NOT_WORKING,
    TestOutcome.ERROR: Status.NOT_WORKING,
    TestOutcome.SKIPPED: Status.SKIPPED,
}


def classify(outcome: TestOutcome) -> Status:
    """Classify an outcome as working, not working or skipped."""
    return _STATUS_BY_OUTCOME[outcome]
