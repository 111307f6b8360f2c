"""Regression analysis and reporting for crates tested across toolchains."""

__version__ = "0.3.0"
