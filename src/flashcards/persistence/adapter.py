"""
Reading and writing the durable session record.

The record remembers the most recently studied level and the last position
reached in every level:

    {"level": "N4", "positions": {"N5": 3, "N4": 10}}
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from flashcards.deck.models import Level
from flashcards.persistence.stores import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "jlptFlashcardsState"


class PersistedRecord(BaseModel):
    """Most recent level plus the remembered index for each level."""

    level: Optional[Level] = Field(None, description="Level studied last; None when the stored value is unknown")
    positions: Dict[Level, int] = Field(default_factory=dict, description="Last index reached per level")

    @field_validator("level", mode="before")
    @classmethod
    def _known_level_or_none(cls, value: Any) -> Optional[Level]:
        return Level.parse(value)

    @field_validator("positions", mode="before")
    @classmethod
    def _usable_positions(cls, value: Any) -> Dict[Level, int]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("positions must be an object")
        positions: Dict[Level, int] = {}
        for key, index in value.items():
            level = Level.parse(key)
            # bool is an int subclass; a stored true/false is not a position
            if level is None or isinstance(index, bool) or not isinstance(index, int) or index < 0:
                continue
            positions[level] = index
        return positions

    def position_for(self, level: Level) -> Optional[int]:
        return self.positions.get(level)

    def to_json(self) -> str:
        payload = {
            "level": self.level.value if self.level else None,
            "positions": {level.value: index for level, index in self.positions.items()},
        }
        return json.dumps(payload, ensure_ascii=False)


class PersistenceAdapter:
    """Loads and saves the single :class:`PersistedRecord` under one fixed key."""

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> Optional[PersistedRecord]:
        """Return the stored record, or None when it is absent or unreadable.

        A corrupt record is never fatal: it is logged and treated as absent.
        """
        try:
            raw = self._store.get(self._key)
        except OSError as e:
            logger.warning(f"Unable to read flashcard state: {e}", extra={"key": self._key})
            return None
        if not raw:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Unable to read flashcard state: {e}", extra={"key": self._key})
            return None
        if not isinstance(data, dict):
            logger.warning("Unable to read flashcard state: record is not an object", extra={"key": self._key})
            return None

        try:
            return PersistedRecord.model_validate(data)
        except ValidationError as e:
            logger.warning(
                f"Unable to read flashcard state: {e.error_count()} invalid field(s)",
                extra={"key": self._key},
            )
            return None

    def save(self, record: PersistedRecord) -> None:
        """Overwrite the stored record."""
        self._store.set(self._key, record.to_json())

    def commit(self, level: Level, index: int) -> PersistedRecord:
        """Record *index* as the position for *level* and make *level* the most recent one.

        Positions remembered for other levels are kept.
        """
        existing = self.load()
        positions = dict(existing.positions) if existing else {}
        positions[level] = index
        record = PersistedRecord(level=level, positions=positions)
        self.save(record)
        logger.debug("Saved session position", extra={"level": level.value, "index": index})
        return record
