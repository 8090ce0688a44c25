"""Insight: portfolio risk and technical-indicator analytics engine."""

__version__ = "0.1.0"
