"""Centralized configuration for report building.

Configuration is loaded from YAML files and validated at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from crater.sources import (
    HttpReleaseIndex,
    JsonDependencyGraph,
    JsonResultStore,
    ReleaseIndex,
    StaticReleaseIndex,
)
from crater.sources.releases import DEFAULT_DIST_URL
from crater.utils.result import ConfigError, Err, Ok, Result

STORE_PATH_ENV = "CRATER_STORE_PATH"

RELEASE_SOURCES = ("static", "http")


@dataclass
class TimeoutConfig:
    """Timeouts, in seconds, for collaborator queries."""

    store_query: float = 60.0
    graph_query: float = 120.0
    release_lookup: float = 30.0


@dataclass
class StoreConfig:
    """Result store and dependency graph locations."""

    path: Path = Path("./data")
    graph_path: Optional[Path] = None
    credentials: dict[str, Any] = field(default_factory=dict)


@dataclass
class ReleaseConfig:
    """How current stable/beta/nightly toolchains are resolved."""

    source: str = "static"
    dist_url: str = DEFAULT_DIST_URL
    lookback_days: int = 60
    static: dict[str, list[Union[str, date]]] = field(default_factory=dict)


@dataclass
class ReportConfig:
    """Report rendering settings."""

    inspector_url: Optional[str] = None
    format: str = "markdown"


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "json"


@dataclass
class CraterConfig:
    """Complete report configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    releases: ReleaseConfig = field(default_factory=ReleaseConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> Result["CraterConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(field="yaml", message="Top level must be a mapping"))

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["CraterConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        try:
            store_data = data.get("store", {})
            graph_path = store_data.get("graph_path")
            store = StoreConfig(
                path=Path(store_data.get("path", "./data")),
                graph_path=Path(graph_path) if graph_path else None,
                credentials=dict(store_data.get("credentials") or {}),
            )

            releases_data = data.get("releases", {})
            releases = ReleaseConfig(
                source=releases_data.get("source", "static"),
                dist_url=releases_data.get("dist_url", DEFAULT_DIST_URL),
                lookback_days=int(releases_data.get("lookback_days", 60)),
                static={
                    channel: list(dates or [])
                    for channel, dates in (releases_data.get("static") or {}).items()
                },
            )

            timeouts_data = data.get("timeouts", {})
            timeouts = TimeoutConfig(
                store_query=float(timeouts_data.get("store_query", 60.0)),
                graph_query=float(timeouts_data.get("graph_query", 120.0)),
                release_lookup=float(timeouts_data.get("release_lookup", 30.0)),
            )

            report_data = data.get("report", {})
            report = ReportConfig(
                inspector_url=report_data.get("inspector_url"),
                format=report_data.get("format", "markdown"),
            )

            logging_data = data.get("logging", {})
            logging_config = LoggingConfig(
                level=logging_data.get("level", "info"),
                format=logging_data.get("format", "json"),
            )

        except (AttributeError, TypeError, ValueError) as e:
            return Err(ConfigError(
                field="unknown",
                message=f"Failed to parse configuration: {e}",
            ))

        return Ok(cls(
            store=store,
            releases=releases,
            timeouts=timeouts,
            report=report,
            logging=logging_config,
        ))

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        for name, value in [
            ("store_query", self.timeouts.store_query),
            ("graph_query", self.timeouts.graph_query),
            ("release_lookup", self.timeouts.release_lookup),
        ]:
            if value <= 0:
                return Err(ConfigError(
                    field=f"timeouts.{name}",
                    message=f"Must be positive, got {value}",
                ))

        if self.releases.source not in RELEASE_SOURCES:
            return Err(ConfigError(
                field="releases.source",
                message=f"Must be one of {', '.join(RELEASE_SOURCES)}, got {self.releases.source}",
            ))

        if self.releases.lookback_days < 0:
            return Err(ConfigError(
                field="releases.lookback_days",
                message=f"Must not be negative, got {self.releases.lookback_days}",
            ))

        if self.report.format not in ("markdown", "json"):
            return Err(ConfigError(
                field="report.format",
                message=f"Must be markdown or json, got {self.report.format}",
            ))

        return Ok(None)

    def create_store(self) -> JsonResultStore:
        """Build the (unconnected) result store."""
        return JsonResultStore(self.store.path, credentials=self.store.credentials)

    def create_graph(self) -> JsonDependencyGraph:
        """Build the dependency graph; it shares the store's root unless overridden."""
        return JsonDependencyGraph(self.store.graph_path or self.store.path)

    def create_release_index(self) -> ReleaseIndex:
        """Build the configured release index."""
        if self.releases.source == "http":
            return HttpReleaseIndex(
                dist_url=self.releases.dist_url,
                lookback_days=self.releases.lookback_days,
                timeout=self.timeouts.release_lookup,
            )
        return StaticReleaseIndex(self.releases.static)


def load_config(config_dir: Optional[Path] = None) -> Result[CraterConfig, ConfigError]:
    """
    Load configuration from the standard location.

    Loads config/defaults.yaml when present, then applies the
    CRATER_STORE_PATH environment override.

    Args:
        config_dir: Configuration directory (defaults to ./config)

    Returns:
        Result with loaded config or error
    """
    if config_dir is None:
        config_dir = Path("./config")

    config_dir = Path(config_dir)

    defaults_path = config_dir / "defaults.yaml"
    if defaults_path.exists():
        result = CraterConfig.from_yaml(defaults_path)
        if result.is_err():
            return result
        config = result.unwrap()
    else:
        config = CraterConfig()

    store_path = os.environ.get(STORE_PATH_ENV)
    if store_path:
        config.store.path = Path(store_path)

    validation_result = config.validate()
    if validation_result.is_err():
        return Err(validation_result.unwrap_err())

    return Ok(config)
