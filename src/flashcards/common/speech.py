"""
Speech port used by the study session, plus its adapters.

The session only ever calls ``speak(text, language)`` and ``cancel_all()``.
Adapters decide how (and whether) the text is actually vocalised.
"""
from __future__ import annotations

import asyncio
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Set

from flashcards.common.tts import AudioFile, TTSClient

logger = logging.getLogger(__name__)

FRONT_LANGUAGE = "ja-JP"
BACK_LANGUAGE = "ko-KR"


class SpeechPort(Protocol):
    def speak(self, text: str, language: str) -> None: ...

    def cancel_all(self) -> None: ...


class NullSpeechPort:
    """Used when no speech capability is available; every request is skipped."""

    def speak(self, text: str, language: str) -> None:
        logger.debug("Speech unavailable, skipping", extra={"language": language})

    def cancel_all(self) -> None:
        pass


class AudioPlayer(Protocol):
    def play(self, audio: AudioFile) -> None: ...

    def stop(self) -> None: ...


class SubprocessAudioPlayer:
    """Plays mp3 files with the first command-line player found on PATH."""

    CANDIDATES = ("mpg123", "afplay", "mpv", "ffplay", "play")
    STOP_TIMEOUT = 1.0

    def __init__(self, work_dir: Path | None = None, command: Optional[List[str]] = None) -> None:
        self._work_dir = work_dir or Path(tempfile.gettempdir()) / "flashcards-audio"
        self._command = command if command is not None else self._detect_command()
        self._process: subprocess.Popen | None = None
        if self._command is None:
            logger.warning("No supported audio player found; speech will be silent")

    @classmethod
    def _detect_command(cls) -> Optional[List[str]]:
        for candidate in cls.CANDIDATES:
            resolved = shutil.which(candidate)
            if not resolved:
                continue
            if candidate == "mpv":
                return [resolved, "--no-video", "--really-quiet"]
            if candidate == "ffplay":
                return [resolved, "-nodisp", "-autoexit", "-loglevel", "quiet"]
            if candidate == "mpg123":
                return [resolved, "-q"]
            return [resolved]
        return None

    def play(self, audio: AudioFile) -> None:
        if self._command is None:
            return
        self.stop()
        path = audio.path
        if path is None or not path.exists():
            # Uncached audio only exists in memory
            self._work_dir.mkdir(parents=True, exist_ok=True)
            path = self._work_dir / audio.filename
            if not path.exists():
                path.write_bytes(audio.content)
        try:
            self._process = subprocess.Popen(
                [*self._command, str(path)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning(f"Unable to launch audio player: {e}", extra={"file": str(path)})
            self._process = None

    def stop(self) -> None:
        process, self._process = self._process, None
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=self.STOP_TIMEOUT)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()


class CloudSpeechPort:
    """Speaks through Google Cloud TTS, one :class:`TTSClient` per language.

    Synthesis runs in the loop's default executor so the event loop never
    blocks on the network. ``cancel_all`` cancels pending syntheses, bumps a
    generation counter so late results are discarded, and stops playback.
    """

    def __init__(
        self,
        clients: Mapping[str, TTSClient],
        player: AudioPlayer,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._clients: Dict[str, TTSClient] = dict(clients)
        self._player = player
        self._loop = loop
        self._generation = 0
        self._pending: Set[asyncio.Future] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def speak(self, text: str, language: str) -> None:
        if not text:
            return
        client = self._clients.get(language)
        if client is None:
            logger.debug("No voice configured for language, skipping", extra={"language": language})
            return

        generation = self._generation
        future = self._get_loop().run_in_executor(None, client.generate_audio, text)
        self._pending.add(future)
        future.add_done_callback(lambda f: self._deliver(f, generation))

    def _deliver(self, future: asyncio.Future, generation: int) -> None:
        self._pending.discard(future)
        if future.cancelled() or generation != self._generation:
            return
        error = future.exception()
        if error is not None:
            logger.warning(f"Speech synthesis failed: {error}")
            return
        self._player.play(future.result())

    def cancel_all(self) -> None:
        self._generation += 1
        for future in list(self._pending):
            future.cancel()
        self._pending.clear()
        self._player.stop()


def build_speech_port(
    voices: Mapping[str, TTSClient],
    player: AudioPlayer | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> SpeechPort:
    """Return a cloud-backed port, or a silent one when no voices are configured."""
    if not voices:
        return NullSpeechPort()
    return CloudSpeechPort(voices, player or SubprocessAudioPlayer(), loop=loop)

