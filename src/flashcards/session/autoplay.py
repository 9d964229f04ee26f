"""
Timed autoplay: show the front, flip to the back, advance, repeat.

Each start creates a fresh :class:`_Run`. Stopping cancels the run's pending
timer and marks it cancelled, so a callback that was already dispatched by
the event loop finds a dead run and does nothing.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from flashcards.common.speech import SpeechPort
from flashcards.session.flip import CardFace, FlipController
from flashcards.session.navigation import NavigationController
from flashcards.session.timers import TimerHandle, TimerPort

logger = logging.getLogger(__name__)

DEFAULT_FRONT_SECONDS = 1.8
DEFAULT_BACK_SECONDS = 1.8


class AutoplayPhase(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"


class _Run:
    """Cancellation token for one continuous stretch of playback."""

    def __init__(self) -> None:
        self.cancelled = False
        self.handle: Optional[TimerHandle] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self.handle is not None:
            self.handle.cancel()
            self.handle = None


class AutoplayScheduler:
    """Drives flip and navigation on a timer while playing.

    Args:
        navigation: Source of the active card; advanced with wrap-around.
        flip: Face state, set to front then back for every card.
        speech: Receives one request per face shown.
        timer: Schedules the two delays.
        front_seconds: How long the front stays up before flipping (T1).
        back_seconds: How long the back stays up before advancing (T2).
        on_change: Called after every timer-driven state change.
    """

    def __init__(
        self,
        navigation: NavigationController,
        flip: FlipController,
        speech: SpeechPort,
        timer: TimerPort,
        front_seconds: float = DEFAULT_FRONT_SECONDS,
        back_seconds: float = DEFAULT_BACK_SECONDS,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._navigation = navigation
        self._flip = flip
        self._speech = speech
        self._timer = timer
        self.front_seconds = front_seconds
        self.back_seconds = back_seconds
        self._on_change = on_change or (lambda: None)
        self._run: Optional[_Run] = None

    @property
    def phase(self) -> AutoplayPhase:
        return AutoplayPhase.PLAYING if self._run is not None else AutoplayPhase.STOPPED

    @property
    def is_playing(self) -> bool:
        return self._run is not None

    def start(self) -> bool:
        """Start playing from the active card. Returns False for an empty deck."""
        if self._run is not None:
            return True
        if self._navigation.active_card is None:
            logger.debug("Autoplay rejected: deck is empty", extra={"level": self._navigation.level.value})
            return False

        run = self._run = _Run()
        logger.debug("Autoplay started", extra={"level": self._navigation.level.value, "index": self._navigation.index})
        try:
            self._show_front(run)
        except Exception:
            # No timer was scheduled, so there is no live sequence to keep
            self.stop()
            raise
        return True

    def stop(self) -> bool:
        """Cancel pending timers and speech. Returns whether playback was running."""
        run, self._run = self._run, None
        if run is None:
            return False
        run.cancel()
        self._speech.cancel_all()
        logger.debug("Autoplay stopped", extra={"level": self._navigation.level.value, "index": self._navigation.index})
        return True

    def toggle(self) -> bool:
        """Start or stop. Returns whether autoplay is running afterwards."""
        if self._run is not None:
            self.stop()
            return False
        return self.start()

    def _schedule(self, run: _Run, delay: float, step: Callable[[_Run], None]) -> None:
        run.handle = self._timer.call_later(delay, lambda: step(run))

    def _is_current(self, run: _Run) -> bool:
        return run is self._run and not run.cancelled

    def _speak(self, face: CardFace) -> None:
        card = self._navigation.active_card
        if card is None:
            return
        self._speech.cancel_all()
        self._speech.speak(face.text_of(card), face.language)

    def _show_front(self, run: _Run) -> None:
        if not self._is_current(run):
            return
        if self._navigation.active_card is None:
            self.stop()
            self._on_change()
            return
        self._flip.reset_to_front()
        self._speak(CardFace.FRONT)
        self._schedule(run, self.front_seconds, self._show_back)

    def _show_back(self, run: _Run) -> None:
        if not self._is_current(run):
            return
        self._flip.show_back()
        self._speak(CardFace.BACK)
        self._on_change()
        self._schedule(run, self.back_seconds, self._advance)

    def _advance(self, run: _Run) -> None:
        if not self._is_current(run):
            return
        self._navigation.advance_wrapping()
        self._flip.reset_to_front()
        self._on_change()
        self._show_front(run)
