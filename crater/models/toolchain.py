"""Toolchain and crate version identifiers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

_TOOLCHAIN_RE = re.compile(
    r"^(?P<channel>[A-Za-z0-9][A-Za-z0-9_.+-]*?)(?:-(?P<date>\d{4}-\d{2}-\d{2}))?$"
)

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Toolchain:
    """
    A named, optionally dated, compiler toolchain.

    Attributes:
        channel: Channel or release name ("stable", "nightly", "1.75.0", ...)
        date: Build date for dated toolchains
    """

    channel: str
    date: Optional[date] = None

    def __str__(self) -> str:
        if self.date is None:
            return self.channel
        return f"{self.channel}-{self.date.strftime(DATE_FORMAT)}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "channel": self.channel,
            "date": self.date.isoformat() if self.date else None,
        }


def parse_toolchain(value: str) -> Toolchain:
    """
    Parse a toolchain identifier such as "nightly-2024-01-05".

    Raises:
        ValueError: If the identifier is empty or malformed
    """
    value = value.strip()
    match = _TOOLCHAIN_RE.match(value)
    if not match:
        raise ValueError(f"Invalid toolchain identifier: {value!r}")

    toolchain_date = None
    if match.group("date"):
        toolchain_date = parse_date(match.group("date"))

    return Toolchain(channel=match.group("channel"), date=toolchain_date)


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD date, raising ValueError otherwise."""
    return datetime.strptime(value, DATE_FORMAT).date()


def format_date(value: date) -> str:
    """Format a date the way toolchain identifiers carry it."""
    return value.strftime(DATE_FORMAT)


@dataclass(frozen=True, order=True)
class CrateVersion:
    """A crate name and version; the unit that gets tested."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"crate": self.name, "version": self.version}

    @classmethod
    def from_dict(cls, data: dict) -> "CrateVersion":
        """Create from a {"crate", "version"} record."""
        return cls(name=data["crate"], version=str(data["version"]))
