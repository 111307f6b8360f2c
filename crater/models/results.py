"""Data models for test outcomes, statuses and regressions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from crater.models.toolchain import CrateVersion, Toolchain


class TestOutcome(Enum):
    """Raw result of building and testing one crate on one toolchain."""

    __test__ = False  # not a pytest test class

    BUILD_SUCCEEDED = "build-succeeded"
    BUILD_FAILED = "build-failed"
    TEST_SUCCEEDED = "test-succeeded"
    TEST_FAILED = "test-failed"
    ERROR = "error"
    SKIPPED = "skipped"


class Status(Enum):
    """Classified status of a crate on a toolchain."""

    WORKING = "working"
    NOT_WORKING = "not-working"
    SKIPPED = "skipped"  # Retained in raw tables, never counted


class Change(Enum):
    """How a crate's status moved between two toolchains."""

    REGRESSED = "regressed"
    FIXED = "fixed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class CrateResult:
    """
    One row of a toolchain's raw result table.

    Attributes:
        crate: The tested crate version
        outcome: Raw outcome reported by the store
        status: Classified status
    """

    crate: CrateVersion
    outcome: TestOutcome
    status: Status

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            **self.crate.to_dict(),
            "outcome": self.outcome.value,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class StatusSummary:
    """
    Status counts for one toolchain, or for a pair of toolchains.

    For a single toolchain only ``working`` and ``not_working`` are set. For
    a comparison, ``working`` and ``not_working`` count crates whose status
    did not change, so the four fields add up to the number of crates
    compared.
    """

    working: int = 0
    not_working: int = 0
    regressed: int = 0
    fixed: int = 0

    @property
    def total(self) -> int:
        """Number of crates accounted for."""
        return self.working + self.not_working + self.regressed + self.fixed

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "working": self.working,
            "not_working": self.not_working,
            "regressed": self.regressed,
            "fixed": self.fixed,
        }


@dataclass(frozen=True)
class CrateComparison:
    """A crate's status on both sides of a comparison."""

    crate: CrateVersion
    from_status: Status
    to_status: Status

    @property
    def change(self) -> Change:
        if self.from_status == Status.WORKING and self.to_status == Status.NOT_WORKING:
            return Change.REGRESSED
        if self.from_status == Status.NOT_WORKING and self.to_status == Status.WORKING:
            return Change.FIXED
        return Change.UNCHANGED

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            **self.crate.to_dict(),
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "change": self.change.value,
        }


@dataclass(frozen=True)
class Regression:
    """
    A crate that worked on ``from_toolchain`` and broke on ``to_toolchain``.

    Attributes:
        crate: The regressed crate version
        from_toolchain: Baseline toolchain
        to_toolchain: Toolchain the crate broke on
        root: True when no regressed dependency explains the breakage
        culprits: Regressed dependencies that explain it (empty when root)
    """

    crate: CrateVersion
    from_toolchain: Toolchain
    to_toolchain: Toolchain
    root: bool = True
    culprits: tuple[CrateVersion, ...] = field(default_factory=tuple)

    @property
    def crate_name(self) -> str:
        return self.crate.name

    @property
    def crate_version(self) -> str:
        return self.crate.version

    def inspector_link(self, template: Optional[str]) -> Optional[str]:
        """
        Build the inspector URL for this regression.

        Args:
            template: URL template with {crate}, {version}, {from_toolchain}
                and {to_toolchain} fields

        Returns:
            Formatted link, or None when no template is configured
        """
        if not template:
            return None
        return template.format(
            crate=self.crate.name,
            version=self.crate.version,
            from_toolchain=self.from_toolchain,
            to_toolchain=self.to_toolchain,
        )

    def to_dict(self, inspector_url: Optional[str] = None) -> dict:
        """Convert to dictionary for serialization."""
        return {
            **self.crate.to_dict(),
            "from_toolchain": str(self.from_toolchain),
            "to_toolchain": str(self.to_toolchain),
            "root": self.root,
            "culprits": [str(c) for c in self.culprits],
            "inspector_link": self.inspector_link(inspector_url),
        }
