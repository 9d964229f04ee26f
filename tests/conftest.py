from __future__ import annotations

import random
from typing import Callable, List, Tuple

import pytest

from flashcards.deck.models import Level, VocabCard
from flashcards.deck.store import DeckStore
from flashcards.persistence.adapter import PersistenceAdapter
from flashcards.persistence.stores import InMemoryKeyValueStore
from flashcards.session.engine import SessionEngine, SessionSettings

T1 = 2.0
T2 = 3.0


class ManualHandle:
    def __init__(self, when: float, seq: int, callback: Callable[[], None]) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimer:
    """Timer port driven by explicit ``advance`` calls instead of wall time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[ManualHandle] = []
        self._seq = 0

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, self._seq, callback)
        self._seq += 1
        self._queue.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        return [h for h in self._queue if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._queue.remove(handle)
            self.now = handle.when
            handle.callback()
        self.now = target


class RecordingSpeech:
    """Speech port that records every request."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, ...]] = []

    def speak(self, text: str, language: str) -> None:
        self.events.append(("speak", text, language))

    def cancel_all(self) -> None:
        self.events.append(("cancel",))

    @property
    def spoken(self) -> List[Tuple[str, str]]:
        return [(e[1], e[2]) for e in self.events if e[0] == "speak"]

    def clear(self) -> None:
        self.events.clear()


def make_card(front: str, back: str, level: Level = Level.N5, **extra) -> VocabCard:
    return VocabCard(front_text=front, back_text=back, level=level, **extra)


@pytest.fixture
def cards() -> List[VocabCard]:
    return [
        make_card("いち", "일"),
        make_card("に", "이"),
        make_card("さん", "삼"),
    ]


@pytest.fixture
def store(cards) -> DeckStore:
    return DeckStore(
        {
            Level.N5: cards,
            Level.N4: [make_card("あつまる", "모이다", Level.N4, alt_front_text="集まる")],
        },
        rng=random.Random(7),
    )


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def persistence(kv) -> PersistenceAdapter:
    return PersistenceAdapter(kv)


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def speech() -> RecordingSpeech:
    return RecordingSpeech()


@pytest.fixture
def make_engine(store, persistence, speech, timer):
    def _make(**overrides) -> SessionEngine:
        kwargs = dict(
            store=store,
            persistence=persistence,
            speech=speech,
            timer=timer,
            settings=SessionSettings(front_seconds=T1, back_seconds=T2),
        )
        kwargs.update(overrides)
        return SessionEngine(**kwargs)

    return _make


@pytest.fixture
def engine(make_engine) -> SessionEngine:
    return make_engine()
