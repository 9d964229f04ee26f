import asyncio
import logging
import threading
from types import SimpleNamespace

import pytest

from flashcards import __main__ as cli
from flashcards.common import speech as speech_module
from flashcards.common.speech import (
    BACK_LANGUAGE,
    FRONT_LANGUAGE,
    CloudSpeechPort,
    NullSpeechPort,
    SubprocessAudioPlayer,
    build_speech_port,
)
from flashcards.common.tts import AudioFile, TTSClient, TTSVoiceConfig
from flashcards.config_models import SpeechConfig, TTSConfig


class FakeClient:
    def __init__(self, name="voice", gate=None, fail=False):
        self.name = name
        self.gate = gate
        self.fail = fail
        self.requests = []

    def generate_audio(self, text):
        self.requests.append(text)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail:
            raise RuntimeError("no credentials")
        return AudioFile(filename=f"{text}.mp3", content=b"mp3")


class FakePlayer:
    def __init__(self):
        self.played = []
        self.stops = 0

    def play(self, audio):
        self.played.append(audio.filename)

    def stop(self):
        self.stops += 1


async def settle(condition, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not condition() and asyncio.get_running_loop().time() < deadline:
        await asyncio.sleep(0.01)


def test_speaks_with_the_voice_for_the_language():
    player = FakePlayer()
    ja, ko = FakeClient("ja-JP"), FakeClient("ko-KR")

    async def scenario():
        port = CloudSpeechPort({"ja-JP": ja, "ko-KR": ko}, player)
        port.speak("みず", "ja-JP")
        await settle(lambda: player.played)

    asyncio.run(scenario())

    assert ja.requests == ["みず"]
    assert ko.requests == []
    assert player.played == ["みず.mp3"]


def test_unknown_language_and_empty_text_are_skipped():
    player = FakePlayer()
    ja = FakeClient("ja-JP")

    async def scenario():
        port = CloudSpeechPort({"ja-JP": ja}, player)
        port.speak("물", "ko-KR")
        port.speak("", "ja-JP")
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert ja.requests == []
    assert player.played == []


def test_cancel_all_discards_pending_audio():
    player = FakePlayer()
    gate = threading.Event()
    ja = FakeClient("ja-JP", gate=gate)

    async def scenario():
        port = CloudSpeechPort({"ja-JP": ja}, player)
        port.speak("みず", "ja-JP")
        port.cancel_all()
        gate.set()
        await asyncio.sleep(0.1)

    asyncio.run(scenario())

    assert player.played == []
    assert player.stops == 1


def test_synthesis_failure_is_logged_and_skipped(caplog):
    player = FakePlayer()
    ja = FakeClient("ja-JP", fail=True)

    async def scenario():
        port = CloudSpeechPort({"ja-JP": ja}, player)
        port.speak("みず", "ja-JP")
        await settle(lambda: any("Speech synthesis failed" in r.getMessage() for r in caplog.records))

    with caplog.at_level(logging.WARNING, logger="flashcards.common.speech"):
        asyncio.run(scenario())

    assert player.played == []
    assert any("Speech synthesis failed" in r.getMessage() for r in caplog.records)


def test_build_speech_port_without_voices_is_silent():
    assert isinstance(build_speech_port({}), NullSpeechPort)


def test_build_speech_port_with_voices():
    port = build_speech_port({"ja-JP": FakeClient("ja-JP")}, player=FakePlayer())

    assert isinstance(port, CloudSpeechPort)


def test_configured_voices_are_used_for_each_face(tmp_path, monkeypatch):
    created = []
    player = FakePlayer()

    class RecordingClient(FakeClient):
        def __init__(self, cache_dir=None, voice_config=None):
            super().__init__(voice_config.voice_name)
            created.append(self)

    monkeypatch.setattr(cli, "TTSClient", RecordingClient)
    monkeypatch.setattr(speech_module, "SubprocessAudioPlayer", lambda: player)
    cfg = SpeechConfig(
        enabled=True,
        audio_cache_dir=tmp_path,
        front=TTSConfig(language_code="ja-jp", voice_name="front-voice"),
        back=TTSConfig(language_code="ja-jp", voice_name="back-voice"),
    )

    async def scenario():
        port = cli.build_speech(cfg, asyncio.get_running_loop())
        port.speak("みず", FRONT_LANGUAGE)
        await settle(lambda: len(player.played) == 1)
        port.speak("물", BACK_LANGUAGE)
        await settle(lambda: len(player.played) == 2)

    asyncio.run(scenario())

    front, back = created
    assert (front.name, front.requests) == ("front-voice", ["みず"])
    assert (back.name, back.requests) == ("back-voice", ["물"])


def test_disabled_speech_is_silent():
    assert isinstance(cli.build_speech(SpeechConfig(enabled=False), None), NullSpeechPort)


class FakeSynthesizer:
    def __init__(self):
        self.calls = []

    def synthesize_speech(self, input, voice, audio_config):
        self.calls.append((input.text, voice.name, voice.language_code))
        return SimpleNamespace(audio_content=b"ID3" + input.text.encode())


def test_tts_client_synthesizes_and_caches(tmp_path):
    client = TTSClient(cache_dir=tmp_path, voice_config=TTSVoiceConfig(language_code="ko-KR", voice_name="ko-KR-Neural2-A"))
    synthesizer = FakeSynthesizer()
    client._client = synthesizer

    first = client.generate_audio("물")
    second = client.generate_audio("물")

    assert synthesizer.calls == [("물", "ko-KR-Neural2-A", "ko-KR")]
    assert first.path == tmp_path / first.filename
    assert first.path.read_bytes() == first.content
    assert second == first


def test_tts_cache_key_depends_on_voice(tmp_path):
    slow = TTSClient(cache_dir=tmp_path, voice_config=TTSVoiceConfig(speaking_rate=0.8))
    fast = TTSClient(cache_dir=tmp_path, voice_config=TTSVoiceConfig(speaking_rate=1.2))

    assert slow._generate_filename("みず") != fast._generate_filename("みず")
    assert slow._generate_filename("みず") == slow._generate_filename("みず")


def test_tts_failure_is_wrapped(tmp_path):
    client = TTSClient(cache_dir=None)
    client._client = SimpleNamespace(synthesize_speech=None)

    with pytest.raises(RuntimeError, match="Failed to generate audio"):
        client.generate_audio("みず")


class FakeProcess:
    launched = []

    def __init__(self, args, **kwargs):
        self.args = args
        self.returncode = None
        self.waited = False
        FakeProcess.launched.append(self)

    def poll(self):
        return self.returncode

    def terminate(self):
        self.returncode = -15

    def wait(self, timeout=None):
        self.waited = True
        return self.returncode

    def kill(self):
        self.returncode = -9


@pytest.fixture
def launched(monkeypatch):
    FakeProcess.launched = []
    monkeypatch.setattr(speech_module.subprocess, "Popen", FakeProcess)
    return FakeProcess.launched


def test_player_uses_cached_file_in_place(tmp_path, launched):
    cached = tmp_path / "a.mp3"
    cached.write_bytes(b"mp3")
    player = SubprocessAudioPlayer(work_dir=tmp_path / "work", command=["player"])

    player.play(AudioFile(filename="a.mp3", content=b"mp3", path=cached))

    assert launched[0].args == ["player", str(cached)]
    assert not (tmp_path / "work").exists()


def test_player_writes_uncached_audio(tmp_path, launched):
    player = SubprocessAudioPlayer(work_dir=tmp_path, command=["player"])

    player.play(AudioFile(filename="b.mp3", content=b"mp3"))

    assert launched[0].args == ["player", str(tmp_path / "b.mp3")]
    assert (tmp_path / "b.mp3").read_bytes() == b"mp3"


def test_player_stop_terminates_and_reaps(tmp_path, launched):
    player = SubprocessAudioPlayer(work_dir=tmp_path, command=["player"])
    player.play(AudioFile(filename="a.mp3", content=b"mp3"))

    player.play(AudioFile(filename="b.mp3", content=b"mp3"))
    player.stop()

    assert [p.returncode for p in launched] == [-15, -15]
    assert all(p.waited for p in launched)


def test_player_without_command_is_silent(tmp_path, launched, monkeypatch):
    monkeypatch.setattr(speech_module.shutil, "which", lambda name: None)
    player = SubprocessAudioPlayer(work_dir=tmp_path)

    player.play(AudioFile(filename="a.mp3", content=b"mp3"))

    assert launched == []
