"""Collaborator interfaces and their adapters."""

from crater.sources.base import DependencyGraph, OutcomeRecord, ReleaseIndex, ResultStore
from crater.sources.json_store import JsonDependencyGraph, JsonResultStore
from crater.sources.releases import HttpReleaseIndex, StaticReleaseIndex

__all__ = [
    # Interfaces
    "ResultStore",
    "DependencyGraph",
    "ReleaseIndex",
    "OutcomeRecord",
    # Adapters
    "JsonResultStore",
    "JsonDependencyGraph",
    "StaticReleaseIndex",
    "HttpReleaseIndex",
]
