"""
Commands accepted by :class:`~flashcards.session.engine.SessionEngine`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from flashcards.deck.models import Level


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Previous:
    pass


@dataclass(frozen=True)
class SetIndex:
    """Slider jump; the index is clamped to the active deck."""
    index: int


@dataclass(frozen=True)
class SelectLevel:
    level: Level


@dataclass(frozen=True)
class Shuffle:
    pass


@dataclass(frozen=True)
class Tap:
    """Tap on the active card: flip it and speak the face now showing."""


@dataclass(frozen=True)
class ToggleAutoplay:
    pass


@dataclass(frozen=True)
class StopAutoplay:
    pass


Command = Union[Next, Previous, SetIndex, SelectLevel, Shuffle, Tap, ToggleAutoplay, StopAutoplay]

# Commands that count as the user taking over from autoplay
MANUAL_COMMANDS = (Next, Previous, SetIndex, SelectLevel, Shuffle, Tap)
