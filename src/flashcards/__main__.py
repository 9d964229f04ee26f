from __future__ import annotations

import argparse
import asyncio
import logging
import random
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from flashcards.common.logging_config import setup_logging
from flashcards.common.speech import BACK_LANGUAGE, FRONT_LANGUAGE, SpeechPort, build_speech_port
from flashcards.common.tts import TTSClient, TTSVoiceConfig
from flashcards.config_models import RunConfig, SpeechConfig, StudyConfig, TTSConfig
from flashcards.deck.models import LEVELS
from flashcards.deck.store import DeckStore, load_vocab_file
from flashcards.persistence.adapter import PersistenceAdapter
from flashcards.persistence.stores import JsonFileKeyValueStore
from flashcards.session.engine import SessionEngine, SessionSettings
from flashcards.session.timers import AsyncioTimer
from flashcards.terminal import run_study_session

logger = logging.getLogger(__name__)


def load_config(path: Path) -> StudyConfig:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    try:
        cfg = RunConfig.model_validate(raw)
    except ValidationError as ve:
        raise SystemExit(f"Invalid configuration in {path}:\n{ve}")
    return cfg.study


def _voice(cfg: TTSConfig) -> TTSVoiceConfig:
    return TTSVoiceConfig(
        language_code=cfg.language_code,
        voice_name=cfg.voice_name,
        model_name=cfg.model_name,
        speaking_rate=cfg.speaking_rate,
        pitch=cfg.pitch,
    )


def build_speech(cfg: SpeechConfig, loop: asyncio.AbstractEventLoop) -> SpeechPort:
    if not cfg.enabled:
        logger.info("Speech disabled; cards will not be spoken")
        return build_speech_port({})
    # Keyed by the tag each face is spoken with; the configured language_code only picks the voice
    voices = {
        FRONT_LANGUAGE: TTSClient(cache_dir=cfg.audio_cache_dir, voice_config=_voice(cfg.front)),
        BACK_LANGUAGE: TTSClient(cache_dir=cfg.audio_cache_dir, voice_config=_voice(cfg.back)),
    }
    return build_speech_port(voices, loop=loop)


def build_store(cfg: StudyConfig) -> DeckStore:
    rng = random.Random(cfg.shuffle_seed)
    return load_vocab_file(cfg.cards_file, rng=rng)


def print_stats(cfg: StudyConfig) -> None:
    store = build_store(cfg)
    record = PersistenceAdapter(JsonFileKeyValueStore(cfg.state_file)).load()

    print(f"{'Level':<6} {'Cards':>6} {'Position':>9}")
    for level in LEVELS:
        position = record.position_for(level) if record else None
        shown = "-" if position is None else str(position + 1)
        marker = " *" if record and record.level == level else ""
        print(f"{level.value:<6} {store.count(level):>6} {shown:>9}{marker}")
    print(f"{'Total':<6} {store.total():>6}")


async def study(cfg: StudyConfig, autoplay: bool = False) -> None:
    loop = asyncio.get_running_loop()
    engine = SessionEngine(
        store=build_store(cfg),
        persistence=PersistenceAdapter(JsonFileKeyValueStore(cfg.state_file)),
        speech=build_speech(cfg.speech, loop),
        timer=AsyncioTimer(loop),
        settings=SessionSettings(
            front_seconds=cfg.front_seconds,
            back_seconds=cfg.back_seconds,
            swipe_threshold=cfg.swipe_threshold,
        ),
    )
    await run_study_session(engine, autoplay=autoplay)


def run_from_config(mode: str, config_path: Optional[Path] = None, log_level: str = "INFO", autoplay: bool = False) -> None:
    """Run the selected mode using a YAML configuration file.

    If config_path is None, defaults to ./config.yaml in the current working directory.

    Args:
        mode: "study" for an interactive session, "stats" for a deck summary
        config_path: Path to the configuration file
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        autoplay: Start the study session in autoplay
    """
    setup_logging(log_level)
    logger.info(f"Starting flashcards: {mode}", extra={"mode": mode, "log_level": log_level})

    cfg = load_config(config_path or Path.cwd() / "config.yaml")

    if mode == "stats":
        print_stats(cfg)
    elif mode == "study":
        try:
            asyncio.run(study(cfg, autoplay=autoplay))
        except KeyboardInterrupt:
            logger.info("Interrupted")
    else:
        raise SystemExit(f"Unknown mode: {mode}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Study JLPT vocabulary flashcards in the terminal")
    parser.add_argument(
        "--mode",
        required=False,
        default="study",
        choices=["study", "stats"],
        help="study: interactive session (default); stats: cards and saved position per level",
    )
    parser.add_argument(
        "--config",
        required=False,
        default="config.yaml",
        help="Path to YAML config (defaults to ./config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        required=False,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO). Use DEBUG to see every command and timer tick.",
    )
    parser.add_argument(
        "--autoplay",
        action="store_true",
        help="Start the study session with autoplay running",
    )
    args = parser.parse_args()

    run_from_config(
        mode=args.mode,
        config_path=Path(args.config),
        log_level=args.log_level,
        autoplay=args.autoplay,
    )


if __name__ == "__main__":
    main()
