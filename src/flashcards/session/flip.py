"""
Which face of the active card is showing.
"""
from __future__ import annotations

from enum import Enum

from flashcards.common.speech import BACK_LANGUAGE, FRONT_LANGUAGE
from flashcards.deck.models import VocabCard


class CardFace(str, Enum):
    FRONT = "front"
    BACK = "back"

    @property
    def language(self) -> str:
        return FRONT_LANGUAGE if self is CardFace.FRONT else BACK_LANGUAGE

    def text_of(self, card: VocabCard) -> str:
        """Text spoken for this face of *card*."""
        return card.front_text if self is CardFace.FRONT else card.back_text


class FlipController:
    """Front/back state for whichever card is active.

    The session resets it to the front every time the active card changes.
    """

    def __init__(self) -> None:
        self._face = CardFace.FRONT

    @property
    def face(self) -> CardFace:
        return self._face

    @property
    def is_front(self) -> bool:
        return self._face is CardFace.FRONT

    def flip(self) -> CardFace:
        """Toggle the face and return the one now showing."""
        self._face = CardFace.BACK if self.is_front else CardFace.FRONT
        return self._face

    def show_back(self) -> None:
        self._face = CardFace.BACK

    def reset_to_front(self) -> None:
        self._face = CardFace.FRONT
