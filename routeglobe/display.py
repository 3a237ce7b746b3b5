"""
Text surfaces shown next to the globe: total count and last update time.
"""

import threading
from typing import Dict


class StatusBoard:
    """Thread-safe holder for the count and "last updated" texts."""

    def __init__(self):
        self._lock = threading.Lock()
        self._count_text = ""
        self._last_update = ""
        self._error = False

    def set_count(self, text: str):
        """Show a formatted total count."""
        with self._lock:
            self._count_text = text
            self._error = False

    def set_error(self, text: str):
        """Replace the count text with an error indicator."""
        with self._lock:
            self._count_text = text
            self._error = True

    def set_last_update(self, text: str):
        """Show the time of the last successful refresh."""
        with self._lock:
            self._last_update = text

    def snapshot(self) -> Dict[str, object]:
        """Get a copy of the current texts."""
        with self._lock:
            return {
                "count_text": self._count_text,
                "last_update": self._last_update,
                "error": self._error,
            }
