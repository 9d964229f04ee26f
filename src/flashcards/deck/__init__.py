"""
Vocabulary deck data: JLPT levels, cards and the per-level store.
"""

from .models import DEFAULT_LEVEL, LEVELS, Level, VocabCard
from .store import DeckStore, load_vocab_file, parse_card

__all__ = [
    "DEFAULT_LEVEL",
    "LEVELS",
    "Level",
    "VocabCard",
    "DeckStore",
    "load_vocab_file",
    "parse_card",
]
