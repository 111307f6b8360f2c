"""Utility modules for crater-report."""

from crater.utils.errors import (
    CraterError,
    DataUnavailable,
    MalformedGraphData,
    UnknownCrate,
)
from crater.utils.logging import (
    configure_logging,
    get_correlation_id,
    get_logger,
    set_report_context,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_correlation_id",
    "set_report_context",
    # Errors
    "CraterError",
    "DataUnavailable",
    "MalformedGraphData",
    "UnknownCrate",
]
