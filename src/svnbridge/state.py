"""Silence / temporary-disable counters shared by every operation.

Both counters are requested and cleared in pairs. Prefer the context
managers, which clear on every exit path::

    with state.silenced():
        client.add("Assets/Foo.png", include_meta=True, recursive=False)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from svnbridge.logging_config import get_logger

logger = get_logger(__name__)


class IntegrationState:
    """Process-wide switches read by operations when they run."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._lock = threading.Lock()
        self._silence_count = 0
        self._disable_count = 0

    @property
    def silent(self) -> bool:
        """True while prompts and notifications must not be shown."""
        return self._silence_count > 0

    @property
    def temporarily_disabled(self) -> bool:
        return self._disable_count > 0

    @property
    def active(self) -> bool:
        return self.enabled and not self.temporarily_disabled

    # ---- silence ----

    def request_silence(self) -> None:
        with self._lock:
            self._silence_count += 1

    def clear_silence(self) -> None:
        with self._lock:
            if self._silence_count == 0:
                logger.error("Trying to clear silence more times than it was requested.")
                return
            self._silence_count -= 1

    @contextmanager
    def silenced(self) -> Iterator["IntegrationState"]:
        self.request_silence()
        try:
            yield self
        finally:
            self.clear_silence()

    # ---- temporary disable ----

    def request_temporary_disable(self) -> None:
        with self._lock:
            self._disable_count += 1

    def clear_temporary_disable(self) -> None:
        with self._lock:
            if self._disable_count == 0:
                logger.error(
                    "Trying to clear temporary disable more times than it was requested."
                )
                return
            self._disable_count -= 1

    @contextmanager
    def temporarily_disable(self) -> Iterator["IntegrationState"]:
        self.request_temporary_disable()
        try:
            yield self
        finally:
            self.clear_temporary_disable()
