"""Exception taxonomy for report building.

``DataUnavailable`` is fatal to the report being built. ``MalformedGraphData``
and ``UnknownCrate`` are recovered where they are detected and kept as
anomalies on the regression analysis.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from crater.models import CrateVersion, Toolchain


class CraterError(Exception):
    """Base class for report building errors."""

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": str(self)}


class DataUnavailable(CraterError):
    """A store, graph or release query failed or returned nothing."""

    def __init__(self, message: str, toolchain: Optional["Toolchain"] = None) -> None:
        super().__init__(message)
        self.toolchain = toolchain

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.toolchain is not None:
            data["toolchain"] = str(self.toolchain)
        return data


class MalformedGraphData(CraterError):
    """A dependency cycle or self-reference was found during traversal."""

    def __init__(self, path: Sequence["CrateVersion"], toolchain: "Toolchain") -> None:
        self.path = tuple(path)
        self.toolchain = toolchain
        chain = " -> ".join(str(c) for c in self.path)
        super().__init__(f"dependency cycle at {toolchain}: {chain}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["path"] = [str(c) for c in self.path]
        return data


class UnknownCrate(CraterError):
    """The dependency graph has no record of a crate version."""

    def __init__(self, crate: "CrateVersion", toolchain: "Toolchain") -> None:
        self.crate = crate
        self.toolchain = toolchain
        super().__init__(f"no dependency data for {crate} at {toolchain}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["crate"] = str(self.crate)
        return data
