"""Byte-offset batch reading of CSV files, record sinks, and environment-driven configuration."""

__version__ = "0.1.0"

__all__ = [
    "batch",
    "environment",
    "future",
    "local_csv",
    "sinks",
    "strutil",
    "workflows",
]