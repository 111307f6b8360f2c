"""Configuration module for crater-report."""

from crater.config.settings import CraterConfig, load_config

__all__ = ["CraterConfig", "load_config"]
