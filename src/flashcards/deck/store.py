"""
Per-level card collections loaded once at startup.
"""
from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from flashcards.deck.models import LEVELS, Level, VocabCard

logger = logging.getLogger(__name__)


def parse_card(raw: Any) -> Optional[VocabCard]:
    """Build a card from one source record, or None if the record is unusable."""
    if not isinstance(raw, Mapping):
        return None
    try:
        return VocabCard.model_validate(raw)
    except ValidationError:
        return None


class DeckStore:
    """Holds one ordered deck per level.

    The only mutation after construction is :meth:`shuffle`, which permutes a
    single level's deck using the injected random source.
    """

    def __init__(self, decks: Mapping[Level, Iterable[VocabCard]] | None = None, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._decks: Dict[Level, Tuple[VocabCard, ...]] = {level: () for level in LEVELS}
        for level, cards in (decks or {}).items():
            self._decks[level] = tuple(cards)

    @classmethod
    def from_records(cls, records: Iterable[Any], rng: random.Random | None = None) -> "DeckStore":
        """Ingest raw source records, dropping the ones that fail validation.

        A record is dropped when it is not a mapping, misses the front text,
        back text or level, or names a level outside N5..N1.
        """
        buckets: Dict[Level, List[VocabCard]] = {level: [] for level in LEVELS}
        dropped = 0
        for raw in records:
            card = parse_card(raw)
            if card is None:
                dropped += 1
                continue
            buckets[card.level].append(card)

        store = cls(buckets, rng=rng)
        logger.debug(
            "Ingested vocabulary records",
            extra={"accepted": store.total(), "dropped": dropped},
        )
        return store

    def cards_for(self, level: Level) -> Tuple[VocabCard, ...]:
        return self._decks.get(level, ())

    def count(self, level: Level) -> int:
        return len(self.cards_for(level))

    def counts(self) -> Dict[Level, int]:
        return {level: len(cards) for level, cards in self._decks.items()}

    def total(self) -> int:
        return sum(len(cards) for cards in self._decks.values())

    def shuffle(self, level: Level) -> None:
        """Replace *level*'s deck with a uniform random permutation (Fisher-Yates)."""
        cards = list(self.cards_for(level))
        if len(cards) <= 1:
            return
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randrange(i + 1)
            cards[i], cards[j] = cards[j], cards[i]
        self._decks[level] = tuple(cards)
        logger.debug("Shuffled deck", extra={"level": level.value, "cards": len(cards)})


def load_vocab_file(path: Path, rng: random.Random | None = None) -> DeckStore:
    """Load a JSON array of vocabulary records (e.g. ``n1-n5_words.json``).

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a JSON array
    """
    if not path.exists():
        raise FileNotFoundError(f"Vocabulary file not found: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Vocabulary file {path} is not valid JSON: {e}") from e
    if not isinstance(raw, list):
        raise ValueError(f"Vocabulary file {path} must contain a JSON array, got {type(raw).__name__}")

    store = DeckStore.from_records(raw, rng=rng)
    logger.info(
        f"Loaded {store.total()} cards from {path.name}",
        extra={level.value: count for level, count in store.counts().items()},
    )
    return store
