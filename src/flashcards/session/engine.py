"""
Study session composition root.

:class:`SessionEngine` wires the deck store, navigation, flip state, gesture
detection, autoplay and persistence together and is the only object callers
talk to. Every user action is a command handled by :meth:`SessionEngine.dispatch`;
its effects (stopping autoplay, saving the position, speaking) happen inside
that call, in that order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from flashcards.common.speech import NullSpeechPort, SpeechPort
from flashcards.deck.models import DEFAULT_LEVEL, Level, VocabCard
from flashcards.deck.store import DeckStore
from flashcards.persistence.adapter import PersistenceAdapter
from flashcards.session.autoplay import DEFAULT_BACK_SECONDS, DEFAULT_FRONT_SECONDS, AutoplayScheduler
from flashcards.session.commands import (
    MANUAL_COMMANDS,
    Command,
    Next,
    Previous,
    SelectLevel,
    SetIndex,
    Shuffle,
    StopAutoplay,
    Tap,
    ToggleAutoplay,
)
from flashcards.session.flip import CardFace, FlipController
from flashcards.session.gestures import DEFAULT_SWIPE_THRESHOLD, GestureDetector
from flashcards.session.navigation import NavigationController
from flashcards.session.timers import AsyncioTimer, TimerPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSettings:
    front_seconds: float = DEFAULT_FRONT_SECONDS
    back_seconds: float = DEFAULT_BACK_SECONDS
    swipe_threshold: float = DEFAULT_SWIPE_THRESHOLD


@dataclass(frozen=True)
class SessionState:
    selected_level: Level
    current_index: int
    is_front_side: bool
    is_autoplaying: bool


@dataclass(frozen=True)
class CardView:
    """Everything a front end needs to draw the session."""

    state: SessionState
    card: Optional[VocabCard]
    total: int
    can_previous: bool
    can_next: bool
    can_shuffle: bool
    can_scrub: bool
    can_autoplay: bool

    @property
    def is_empty(self) -> bool:
        return self.card is None

    @property
    def position_label(self) -> str:
        current = 0 if self.total == 0 else self.state.current_index + 1
        return f"{current} / {self.total}"


Listener = Callable[[SessionState], None]


class SessionEngine:
    """One flashcard study session.

    Args:
        store: Decks for every level, loaded once.
        persistence: Where the (level, index) position is remembered.
        speech: Speech port; when omitted every speech request is skipped.
        timer: Timer port for autoplay; defaults to the running asyncio loop.
        settings: Autoplay durations and swipe threshold.
    """

    def __init__(
        self,
        store: DeckStore,
        persistence: PersistenceAdapter,
        speech: SpeechPort | None = None,
        timer: TimerPort | None = None,
        settings: SessionSettings | None = None,
    ) -> None:
        self._store = store
        self._persistence = persistence
        self._speech = speech or NullSpeechPort()
        self._settings = settings or SessionSettings()

        self._navigation = NavigationController(store)
        self._flip = FlipController()
        self._gestures = GestureDetector(self._settings.swipe_threshold)
        self._autoplay = AutoplayScheduler(
            self._navigation,
            self._flip,
            self._speech,
            timer or AsyncioTimer(),
            front_seconds=self._settings.front_seconds,
            back_seconds=self._settings.back_seconds,
            on_change=self._commit,
        )

        self._listeners: List[Listener] = []
        self._saved: Optional[Tuple[Optional[Level], Optional[int]]] = None
        self._closed = False
        self._handlers: Dict[type, Callable[[Command], None]] = {
            Next: self._on_next,
            Previous: self._on_previous,
            SetIndex: self._on_set_index,
            SelectLevel: self._on_select_level,
            Shuffle: self._on_shuffle,
            Tap: self._on_tap,
            ToggleAutoplay: self._on_toggle_autoplay,
            StopAutoplay: self._on_stop_autoplay,
        }

        self._hydrate()

    # ---- state ----

    @property
    def state(self) -> SessionState:
        return SessionState(
            selected_level=self._navigation.level,
            current_index=self._navigation.index,
            is_front_side=self._flip.is_front,
            is_autoplaying=self._autoplay.is_playing,
        )

    @property
    def active_card(self) -> Optional[VocabCard]:
        return self._navigation.active_card

    @property
    def store(self) -> DeckStore:
        return self._store

    @property
    def closed(self) -> bool:
        return self._closed

    def view(self) -> CardView:
        total = self._navigation.total
        return CardView(
            state=self.state,
            card=self._navigation.active_card,
            total=total,
            can_previous=total > 0 and not self._navigation.at_start,
            can_next=total > 0 and not self._navigation.at_end,
            can_shuffle=total > 1,
            can_scrub=total > 1,
            can_autoplay=total > 0,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with the new state after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- commands ----

    def dispatch(self, command: Command) -> SessionState:
        if self._closed:
            raise RuntimeError("Session is closed")
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported command: {command!r}")

        logger.debug(f"Command {type(command).__name__}", extra={"level": self._navigation.level.value, "index": self._navigation.index})
        if isinstance(command, MANUAL_COMMANDS):
            self._autoplay.stop()
        handler(command)
        self._commit()
        return self.state

    def next(self) -> SessionState:
        return self.dispatch(Next())

    def previous(self) -> SessionState:
        return self.dispatch(Previous())

    def set_index(self, index: int) -> SessionState:
        return self.dispatch(SetIndex(index))

    def select_level(self, level: Level) -> SessionState:
        return self.dispatch(SelectLevel(level))

    def shuffle(self) -> SessionState:
        return self.dispatch(Shuffle())

    def tap(self) -> SessionState:
        return self.dispatch(Tap())

    def toggle_autoplay(self) -> SessionState:
        return self.dispatch(ToggleAutoplay())

    def stop_autoplay(self) -> SessionState:
        return self.dispatch(StopAutoplay())

    def swipe_start(self, x: float) -> None:
        self._gestures.on_start(x)

    def swipe_move(self, x: float) -> None:
        self._gestures.on_move(x)

    def swipe_end(self) -> Optional[Command]:
        """Finish a gesture, dispatching Next/Previous when it was a swipe."""
        command = self._gestures.on_end()
        if command is not None:
            self.dispatch(command)
        return command

    def close(self) -> None:
        """Stop autoplay and any speech. Further commands raise RuntimeError."""
        if self._closed:
            return
        self._autoplay.stop()
        self._speech.cancel_all()
        self._listeners.clear()
        self._closed = True
        logger.debug("Session closed")

    def __enter__(self) -> "SessionEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- handlers ----

    def _on_next(self, command: Command) -> None:
        if self._navigation.next():
            self._flip.reset_to_front()

    def _on_previous(self, command: Command) -> None:
        if self._navigation.previous():
            self._flip.reset_to_front()

    def _on_set_index(self, command: SetIndex) -> None:
        self._navigation.set_index(command.index)
        self._flip.reset_to_front()

    def _on_select_level(self, command: SelectLevel) -> None:
        self._navigation.select_level(command.level)
        self._flip.reset_to_front()

    def _on_shuffle(self, command: Command) -> None:
        self._store.shuffle(self._navigation.level)
        self._navigation.set_index(0)
        self._flip.reset_to_front()

    def _on_tap(self, command: Command) -> None:
        card = self._navigation.active_card
        if card is None:
            return
        face: CardFace = self._flip.flip()
        self._speech.cancel_all()
        self._speech.speak(face.text_of(card), face.language)

    def _on_toggle_autoplay(self, command: Command) -> None:
        self._autoplay.toggle()

    def _on_stop_autoplay(self, command: Command) -> None:
        self._autoplay.stop()

    # ---- persistence ----

    def _hydrate(self) -> None:
        record = self._persistence.load()
        if record is not None:
            level = record.level or DEFAULT_LEVEL
            stored_index = record.position_for(level)
            self._navigation.restore(level, stored_index if stored_index is not None else 0)
            self._saved = (record.level, stored_index)
            logger.info(
                "Restored session position",
                extra={"level": level.value, "index": self._navigation.index},
            )
        self._commit()

    def _commit(self) -> None:
        """Save the position if it moved, then notify listeners."""
        self._navigation.reclamp()
        position = (self._navigation.level, self._navigation.index)
        if position != self._saved:
            try:
                self._persistence.commit(*position)
            except OSError as e:
                logger.warning(f"Unable to save flashcard state: {e}")
            else:
                self._saved = position

        state = self.state
        for listener in list(self._listeners):
            listener(state)
