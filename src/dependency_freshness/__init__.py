"""Dependency freshness analysis for Maestro build graphs."""

__version__ = "0.1.0"
