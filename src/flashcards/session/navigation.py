"""
Current level and card index, always kept inside the active deck.
"""
from __future__ import annotations

from typing import Optional

from flashcards.deck.models import DEFAULT_LEVEL, Level, VocabCard
from flashcards.deck.store import DeckStore


def clamp(value: int, total: int) -> int:
    """Constrain *value* to ``[0, total - 1]``; 0 for an empty deck."""
    if total <= 0:
        return 0
    return min(max(value, 0), total - 1)


class NavigationController:
    """Owns the selected level and the index into that level's deck.

    Manual moves (:meth:`next`, :meth:`previous`) stop at the deck edges;
    only :meth:`advance_wrapping`, used by autoplay, wraps around.
    """

    def __init__(self, store: DeckStore, level: Level = DEFAULT_LEVEL) -> None:
        self._store = store
        self._level = level
        self._index = 0

    @property
    def level(self) -> Level:
        return self._level

    @property
    def index(self) -> int:
        return self._index

    @property
    def total(self) -> int:
        return self._store.count(self._level)

    @property
    def active_card(self) -> Optional[VocabCard]:
        cards = self._store.cards_for(self._level)
        if not cards:
            return None
        return cards[clamp(self._index, len(cards))]

    @property
    def at_start(self) -> bool:
        return self._index <= 0

    @property
    def at_end(self) -> bool:
        return self._index >= self.total - 1

    def set_index(self, target: int) -> int:
        self._index = clamp(target, self.total)
        return self._index

    def next(self) -> bool:
        """Move forward one card. Returns False at the last card."""
        if self.total == 0 or self.at_end:
            return False
        self._index += 1
        return True

    def previous(self) -> bool:
        """Move back one card. Returns False at the first card."""
        if self.at_start:
            return False
        self._index -= 1
        return True

    def advance_wrapping(self) -> int:
        total = self.total
        self._index = 0 if total == 0 or self._index >= total - 1 else self._index + 1
        return self._index

    def select_level(self, level: Level) -> None:
        self._level = level
        self._index = 0

    def restore(self, level: Level, index: int) -> int:
        """Jump to a remembered position, clamped to the deck as it is now."""
        self._level = level
        return self.set_index(index)

    def reclamp(self) -> int:
        return self.set_index(self._index)
