"""
Data models for JLPT vocabulary cards.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Level(str, Enum):
    """JLPT difficulty tier, declared easiest to hardest."""

    N5 = "N5"
    N4 = "N4"
    N3 = "N3"
    N2 = "N2"
    N1 = "N1"

    @classmethod
    def parse(cls, value: object) -> Optional["Level"]:
        """Return the matching level, or None when *value* is not a tier name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return None
        return None


LEVELS: tuple[Level, ...] = tuple(Level)
DEFAULT_LEVEL = Level.N5


class VocabCard(BaseModel):
    """A single flashcard: Japanese on the front, Korean on the back.

    Source files use ``hiragana``/``nihongo``/``korean``/``romaji`` keys; both
    those and the attribute names are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    front_text: str = Field(..., min_length=1, alias="hiragana", description="Reading shown and spoken on the front")
    alt_front_text: Optional[str] = Field(None, alias="nihongo", description="Kanji spelling, displayed when present")
    back_text: str = Field(..., min_length=1, alias="korean", description="Translation shown and spoken on the back")
    level: Level = Field(..., description="JLPT tier the card belongs to")
    romanization: Optional[str] = Field(None, alias="romaji", description="Latin transliteration of the reading")

    @property
    def display_front(self) -> str:
        return self.alt_front_text or self.front_text
