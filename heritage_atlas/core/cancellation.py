"""Liveness tokens for results that arrive after their view is gone.

A LivenessToken is issued per mounted view (each MapRenderer.initialize and
each wizard location picker). Work that follows I/O checks the token before
mutating state; a result delivered to a cancelled token is dropped.
"""

import itertools
import logging
from collections.abc import Callable
from typing import Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_token_ids = itertools.count(1)


class LivenessToken:
    """Cancellable marker tied to one mounted view.

    Example:
        token = LivenessToken(label="map")
        image = fetch(url)
        token.run_if_alive(lambda: renderer.store(image))
        token.cancel()  # on teardown
    """

    def __init__(self, label: str = "") -> None:
        self.id = next(_token_ids)
        self.label = label
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    def cancel(self) -> None:
        if self._alive:
            logger.debug(f"[TOKEN] cancelled {self}")
        self._alive = False

    def run_if_alive(self, fn: Callable[[], T], what: str = "result") -> Optional[T]:
        """Run fn only while the token is alive; otherwise drop it and return None."""
        if not self._alive:
            logger.debug(f"[TOKEN] dropped late {what} for {self}")
            return None
        return fn()

    def __repr__(self) -> str:
        state = "alive" if self._alive else "cancelled"
        return f"LivenessToken({self.label or self.id}, {state})"
