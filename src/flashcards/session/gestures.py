"""
Horizontal swipe detection.
"""
from __future__ import annotations

from typing import Optional

from flashcards.session.commands import Next, Previous

DEFAULT_SWIPE_THRESHOLD = 50.0


class GestureDetector:
    """Turns start/move/end x-coordinates into a navigation command.

    Swiping left (finger moves toward smaller x) goes to the next card,
    swiping right goes back. A touch with no movement is a tap, not a swipe.
    """

    def __init__(self, threshold: float = DEFAULT_SWIPE_THRESHOLD) -> None:
        self.threshold = threshold
        self._start_x: Optional[float] = None
        self._last_x: Optional[float] = None

    def on_start(self, x: float) -> None:
        self._start_x = x
        self._last_x = None

    def on_move(self, x: float) -> None:
        if self._start_x is not None:
            self._last_x = x

    def on_end(self) -> Next | Previous | None:
        start, last = self._start_x, self._last_x
        self._start_x = self._last_x = None
        if start is None or last is None:
            return None

        distance = start - last
        if distance > self.threshold:
            return Next()
        if distance < -self.threshold:
            return Previous()
        return None
