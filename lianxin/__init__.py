"""Lianxin multi-service database configuration."""

__version__ = "0.1.0"
