"""
Utility functions for Route Globe Monitor.
Includes logging and display formatting helpers.
"""

import datetime
from typing import Optional


def log(source: str, message: str):
    """
    Log a message with timestamp and source.

    Args:
        source: The source/module of the log message
        message: The log message
    """
    timestamp = datetime.datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] [{source}] {message}")


def format_clock(ts: Optional[float] = None) -> str:
    """Format a Unix timestamp as a wall-clock time (HH:MM:SS)."""
    if ts is None:
        dt = datetime.datetime.now()
    else:
        dt = datetime.datetime.fromtimestamp(ts)
    return dt.strftime("%H:%M:%S")


def format_count(count: int) -> str:
    """Format a count with thousands separators."""
    return f"{count:,}"
