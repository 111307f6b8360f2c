"""Abstract interfaces for the data the report engine reads.

Reports never write through these interfaces. Implementations raise
``DataUnavailable`` for failed queries and ``UnknownCrate`` when the
dependency graph has no record of a crate version.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

from crater.models import CrateVersion, TestOutcome, Toolchain
from crater.utils.errors import DataUnavailable
from crater.utils.logging import get_logger

logger = get_logger("sources.base")

OutcomeRecord = tuple[CrateVersion, TestOutcome]


class ResultStore(ABC):
    """
    Read access to persisted per-crate, per-toolchain test outcomes.

    Stores have an explicit connect/disconnect lifecycle and can be used as
    a context manager for scoped acquisition.
    """

    def __init__(self, credentials: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the store.

        Args:
            credentials: Opaque connection settings, passed through as-is
        """
        self.credentials = dict(credentials or {})
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> "ResultStore":
        """Open the store. Returns self so calls can be chained."""
        self._open()
        self._connected = True
        logger.debug("store_connected", store=type(self).__name__)
        return self

    def disconnect(self) -> None:
        """Release the store. Safe to call more than once."""
        if not self._connected:
            return
        try:
            self._close()
        finally:
            self._connected = False
            logger.debug("store_disconnected", store=type(self).__name__)

    def __enter__(self) -> "ResultStore":
        return self.connect()

    def __exit__(self, *args: Any) -> None:
        self.disconnect()

    def query_outcomes(self, toolchain: Toolchain) -> Optional[list[OutcomeRecord]]:
        """
        Get every recorded outcome for a toolchain.

        Args:
            toolchain: Toolchain to query

        Returns:
            List of (crate, outcome) pairs, an empty list when the toolchain
            was run with zero crates, or None when nothing is recorded

        Raises:
            DataUnavailable: If the store is not connected or the query fails
        """
        if not self._connected:
            raise DataUnavailable("result store is not connected", toolchain=toolchain)
        records = self._query(toolchain)
        # Discard rows read while the store was being released
        if not self._connected:
            raise DataUnavailable("result store was disconnected during the query", toolchain=toolchain)
        return records

    def _open(self) -> None:
        """Acquire underlying resources."""

    def _close(self) -> None:
        """Release underlying resources."""

    @abstractmethod
    def _query(self, toolchain: Toolchain) -> Optional[list[OutcomeRecord]]:
        ...


class DependencyGraph(ABC):
    """Direct dependencies of crate versions as resolved for a toolchain run."""

    @abstractmethod
    def direct_dependencies(
        self,
        crate: CrateVersion,
        as_of: Toolchain,
    ) -> frozenset[CrateVersion]:
        """
        Get the direct dependencies of a crate as tested on a toolchain.

        Args:
            crate: Crate version to look up
            as_of: Toolchain run whose resolution is used

        Returns:
            Set of dependency crate versions (empty when it has none)

        Raises:
            UnknownCrate: If the graph has no record of the crate
            DataUnavailable: If the graph cannot be read at all
        """
        ...


class ReleaseIndex(ABC):
    """Resolves which toolchain was current on a channel for a date."""

    CHANNELS = ("stable", "beta", "nightly")

    @abstractmethod
    async def resolve(self, channel: str, as_of: date) -> Toolchain:
        """
        Get the most recent release of a channel on or before a date.

        Raises:
            DataUnavailable: If no release can be found
        """
        ...

    async def resolve_all(self, as_of: date) -> dict[str, Toolchain]:
        """Resolve every channel in CHANNELS."""
        return {channel: await self.resolve(channel, as_of) for channel in self.CHANNELS}

