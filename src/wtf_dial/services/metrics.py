"""Process-wide error counters for the HTTP layer.

One ``ErrorMetrics`` instance is created when the app starts, stored on
``app.state`` and handed to handlers through a dependency.
"""

from __future__ import annotations

from collections import Counter
from threading import Lock


class ErrorMetrics:
    """Thread-safe count of errors reported, keyed by error code."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._counts: Counter[str] = Counter()

    def record(self, code: str) -> None:
        """Count one error with ``code``."""
        with self._lock:
            self._counts[code] += 1

    def snapshot(self) -> dict[str, int]:
        """Return a copy of the current counts."""
        with self._lock:
            return dict(self._counts)

    def reset(self) -> None:
        """Forget all counts."""
        with self._lock:
            self._counts.clear()
