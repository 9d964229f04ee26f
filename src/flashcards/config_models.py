from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from flashcards.session.autoplay import DEFAULT_BACK_SECONDS, DEFAULT_FRONT_SECONDS
from flashcards.session.gestures import DEFAULT_SWIPE_THRESHOLD


class TTSConfig(BaseModel):
    """Google Cloud TTS voice for one side of the card."""
    language_code: str = Field(..., description="BCP-47 language code (e.g. ja-JP, ko-KR)")
    voice_name: str = Field(..., description="Cloud TTS voice name (e.g. ja-JP-Neural2-B)")
    model_name: Optional[str] = Field(default=None, description="Optional TTS model name")
    speaking_rate: float = Field(default=1.0, ge=0.25, le=4.0, description="Speaking rate (0.25-4.0)")
    pitch: float = Field(default=0.0, ge=-20.0, le=20.0, description="Voice pitch (-20.0 to 20.0)")


def _default_front_voice() -> TTSConfig:
    return TTSConfig(language_code="ja-JP", voice_name="ja-JP-Neural2-B", speaking_rate=0.9)


def _default_back_voice() -> TTSConfig:
    return TTSConfig(language_code="ko-KR", voice_name="ko-KR-Neural2-A", speaking_rate=1.0)


class SpeechConfig(BaseModel):
    """Spoken playback settings.

    - enabled: when false (or when no credentials are available) the session runs silently
    - audio_cache_dir: synthesized mp3 files are cached here, keyed by voice and text
    - front/back: voices for the Japanese and Korean faces
    """
    enabled: bool = Field(default=False, description="Speak cards through Google Cloud TTS")
    audio_cache_dir: Path = Field(default=Path("cache/audio"), description="Directory for cached mp3 files")
    front: TTSConfig = Field(default_factory=_default_front_voice, description="Voice for the front (Japanese) face")
    back: TTSConfig = Field(default_factory=_default_back_voice, description="Voice for the back (Korean) face")


class StudyConfig(BaseModel):
    """Configuration for a study session.

    - cards_file: JSON array of vocabulary records
    - state_file: JSON file remembering the last level and per-level positions
    - front_seconds/back_seconds: autoplay display durations
    - shuffle_seed: fixes the shuffle order when set
    """
    cards_file: Path = Field(..., description="Path to the vocabulary JSON file")
    state_file: Path = Field(default=Path("state/session.json"), description="Path to the persisted session state")
    front_seconds: float = Field(default=DEFAULT_FRONT_SECONDS, gt=0, description="Seconds the front is shown in autoplay")
    back_seconds: float = Field(default=DEFAULT_BACK_SECONDS, gt=0, description="Seconds the back is shown in autoplay")
    swipe_threshold: float = Field(default=DEFAULT_SWIPE_THRESHOLD, gt=0, description="Minimum swipe distance")
    shuffle_seed: Optional[int] = Field(default=None, description="Seed for the shuffle random source")
    speech: SpeechConfig = Field(default_factory=SpeechConfig, description="Spoken playback settings")


class RunConfig(BaseModel):
    """Top-level configuration file schema."""

    study: StudyConfig
