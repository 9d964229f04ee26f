import asyncio
import io
import logging
import os
import sys
import threading
from pathlib import Path

import pytest

from flashcards.__main__ import load_config, print_stats
from flashcards.common.logging_config import ContextFormatter, setup_logging
from flashcards.deck.models import Level
from flashcards.persistence.adapter import PersistenceAdapter
from flashcards.persistence.stores import JsonFileKeyValueStore
from flashcards.session.commands import Next, Previous, SelectLevel, SetIndex, Shuffle, Tap, ToggleAutoplay
from flashcards.terminal import format_view, parse_command, run_study_session

from conftest import make_card


@pytest.mark.parametrize(
    "line, expected",
    [
        ("n", Next()),
        (" P ", Previous()),
        ("t", Tap()),
        ("s", Shuffle()),
        ("a", ToggleAutoplay()),
        ("g 3", SetIndex(2)),
        ("l n3", SelectLevel(Level.N3)),
        ("L N1", SelectLevel(Level.N1)),
        ("l N9", None),
        ("g x", None),
        ("n 2", None),
        ("", None),
        ("jump", None),
    ],
)
def test_parse_command(line, expected):
    assert parse_command(line) == expected


def test_format_view_front_and_back(engine):
    engine.select_level(Level.N4)
    front = format_view(engine.view())
    assert front.splitlines()[0] == "[N4] 1 / 1"
    assert "集まる" in front
    assert "あつまる" in front

    engine.tap()
    back = format_view(engine.view())
    assert "모이다" in back


def test_format_view_empty_level(engine):
    engine.select_level(Level.N1)

    assert "No cards" in format_view(engine.view())


def test_format_view_marks_autoplay(engine):
    engine.toggle_autoplay()

    assert "(autoplay)" in format_view(engine.view()).splitlines()[0]


def test_load_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "study:\n"
        "  cards_file: words.json\n"
        "  front_seconds: 2.5\n"
        "  shuffle_seed: 4\n"
        "  speech:\n"
        "    enabled: true\n",
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.cards_file == Path("words.json")
    assert cfg.front_seconds == 2.5
    assert cfg.back_seconds == 1.8
    assert cfg.swipe_threshold == 50
    assert cfg.shuffle_seed == 4
    assert cfg.speech.enabled
    assert cfg.speech.front.language_code == "ja-JP"
    assert cfg.speech.front.speaking_rate == 0.9
    assert cfg.speech.back.language_code == "ko-KR"


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "config.yaml")


@pytest.mark.parametrize("body", ["study:\n  front_seconds: 1\n", "study:\n  cards_file: w.json\n  back_seconds: -1\n", ""])
def test_load_config_invalid(tmp_path, body):
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(SystemExit):
        load_config(path)


def test_print_stats(tmp_path, capsys):
    cards = tmp_path / "words.json"
    cards.write_text(
        '[{"hiragana": "みず", "korean": "물", "level": "N5"},'
        ' {"hiragana": "ひ", "korean": "불", "level": "N5"},'
        ' {"hiragana": "あつまる", "korean": "모이다", "level": "N4"}]',
        encoding="utf-8",
    )
    state = tmp_path / "session.json"
    PersistenceAdapter(JsonFileKeyValueStore(state)).commit(Level.N5, 1)
    config = tmp_path / "config.yaml"
    config.write_text(f"study:\n  cards_file: {cards}\n  state_file: {state}\n", encoding="utf-8")

    print_stats(load_config(config))

    lines = capsys.readouterr().out.splitlines()
    assert lines[1].split() == ["N5", "2", "2", "*"]
    assert lines[2].split() == ["N4", "1", "-"]
    assert lines[-1].split() == ["Total", "3"]


def test_context_formatter_appends_extra_fields():
    formatter = ContextFormatter(fmt="[%(levelname)s] %(name)s: %(message)s", use_color=False)
    record = logging.LogRecord("flashcards.x", logging.INFO, __file__, 1, "Saved", None, None)
    record.level = "N5"
    record.index = 3

    assert formatter.format(record) == "[INFO] flashcards.x: Saved | level=N5 index=3"


@pytest.fixture
def restore_flashcards_logger():
    logger = logging.getLogger("flashcards")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


def test_setup_logging(restore_flashcards_logger):
    setup_logging("debug", use_color=False)
    setup_logging("DEBUG", use_color=False)

    logger = restore_flashcards_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert not logger.propagate


def test_study_session_reads_commands_until_quit(engine, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("n\nbogus\nq\nn\n"))

    asyncio.run(run_study_session(engine))

    assert engine.closed
    assert engine.state.current_index == 1
    assert "Unknown command: 'bogus'" in capsys.readouterr().out


def test_study_session_ends_at_end_of_input(engine, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("n\nn\n"))

    asyncio.run(run_study_session(engine))

    assert engine.closed
    assert engine.state.current_index == 2


def test_study_session_returns_while_input_is_still_open(engine, monkeypatch):
    read_fd, write_fd = os.pipe()
    stdin = open(read_fd, "r", encoding="utf-8")
    monkeypatch.setattr(sys, "stdin", stdin)
    os.write(write_fd, b"n\nq\n")

    try:
        asyncio.run(run_study_session(engine))

        reader = next(t for t in threading.enumerate() if t.name == "flashcards-input")
        assert reader.daemon
        assert engine.closed
    finally:
        os.close(write_fd)
        stdin.close()
