"""
Text-to-speech audio generation using Google Cloud TTS.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

from google.cloud import texttospeech


@dataclass
class AudioFile:
    """Represents generated audio file."""
    filename: str
    content: bytes
    path: Path | None = None


@dataclass
class TTSVoiceConfig:
    """Voice configuration for one spoken language."""
    language_code: str = "ja-JP"
    voice_name: str = "ja-JP-Neural2-B"
    model_name: str | None = None
    speaking_rate: float = 1.0
    pitch: float = 0.0


class TTSClient:
    """Text-to-speech client for a single voice, with on-disk caching."""

    def __init__(self, cache_dir: Path | None = None, voice_config: TTSVoiceConfig | None = None):
        """Initialize TTS client.

        Args:
            cache_dir: Directory to cache audio files. If None, no caching.
            voice_config: Voice configuration. If None, uses defaults.
        """
        self._client: texttospeech.TextToSpeechClient | None = None
        self._cache_dir = cache_dir
        self._voice_config = voice_config or TTSVoiceConfig()
        if cache_dir is not None:
            cache_dir.mkdir(parents=True, exist_ok=True)

    def _get_client(self) -> texttospeech.TextToSpeechClient:
        """Get or create TTS client (lazy initialization with service account auth)."""
        if self._client is None:
            self._client = texttospeech.TextToSpeechClient()
        return self._client

    def _generate_filename(self, text: str) -> str:
        """Generate filename from text, voice and rate so each voice caches separately."""
        cfg = self._voice_config
        key = f"{cfg.language_code}|{cfg.voice_name}|{cfg.speaking_rate}|{text}"
        text_hash = hashlib.md5(key.encode()).hexdigest()
        return f"{text_hash}.mp3"

    def generate_audio(self, text: str) -> AudioFile:
        """Generate audio from text, checking the cache first.

        Raises:
            RuntimeError: If audio generation fails
        """
        filename = self._generate_filename(text)

        if self._cache_dir is not None:
            cache_path = self._cache_dir / filename
            if cache_path.exists():
                return AudioFile(filename=filename, content=cache_path.read_bytes(), path=cache_path)

        try:
            client = self._get_client()
            synthesis_input = texttospeech.SynthesisInput(text=text)

            voice_params = {
                "name": self._voice_config.voice_name,
                "language_code": self._voice_config.language_code,
            }
            if self._voice_config.model_name:
                voice_params["model_name"] = self._voice_config.model_name
            voice = texttospeech.VoiceSelectionParams(**voice_params)

            audio_config = texttospeech.AudioConfig(
                audio_encoding=texttospeech.AudioEncoding.MP3,
                speaking_rate=self._voice_config.speaking_rate,
                pitch=self._voice_config.pitch,
            )

            response = client.synthesize_speech(
                input=synthesis_input,
                voice=voice,
                audio_config=audio_config,
            )

            audio_content = response.audio_content

            cache_path = None
            if self._cache_dir is not None:
                cache_path = self._cache_dir / filename
                cache_path.write_bytes(audio_content)

            return AudioFile(filename=filename, content=audio_content, path=cache_path)

        except Exception as e:
            raise RuntimeError(f"Failed to generate audio for text '{text[:50]}': {e}") from e
