"""
Terminal front end for a study session.

Reads one command per line while the asyncio loop keeps autoplay timers
running in the background.
"""
from __future__ import annotations

import asyncio
import logging
import sys
import threading
from typing import Optional

from flashcards.deck.models import LEVELS, Level
from flashcards.session.commands import (
    Command,
    Next,
    Previous,
    SelectLevel,
    SetIndex,
    Shuffle,
    Tap,
    ToggleAutoplay,
)
from flashcards.session.engine import CardView, SessionEngine

logger = logging.getLogger(__name__)

HELP = (
    "Commands: n=next  p=previous  t=flip  s=shuffle  a=autoplay on/off\n"
    "          g <number>=go to card  l <N5..N1>=level  h=help  q=quit"
)


def format_view(view: CardView) -> str:
    """Render the session as a few lines of text."""
    state = view.state
    header = f"[{state.selected_level.value}] {view.position_label}"
    if state.is_autoplaying:
        header += "  (autoplay)"
    if view.is_empty:
        return f"{header}\n  No cards in this level."

    card = view.card
    if state.is_front_side:
        lines = [f"  {card.display_front}"]
        if card.alt_front_text and card.alt_front_text != card.front_text:
            lines.append(f"  {card.front_text}")
        if card.romanization:
            lines.append(f"  {card.romanization}")
    else:
        lines = [f"  {card.back_text}", f"  ({card.display_front})"]
    return "\n".join([header, *lines])


def parse_command(line: str) -> Optional[Command]:
    """Map one input line to a session command. Returns None for unknown input."""
    parts = line.strip().split()
    if not parts:
        return None
    verb, args = parts[0].lower(), parts[1:]

    simple = {"n": Next, "p": Previous, "t": Tap, "s": Shuffle, "a": ToggleAutoplay}
    if verb in simple and not args:
        return simple[verb]()
    if verb == "g" and len(args) == 1 and args[0].lstrip("-").isdigit():
        # Cards are numbered from 1 on screen
        return SetIndex(int(args[0]) - 1)
    if verb == "l" and len(args) == 1:
        level = Level.parse(args[0].upper())
        if level is not None:
            return SelectLevel(level)
    return None


def read_lines(loop: asyncio.AbstractEventLoop) -> "asyncio.Queue[Optional[str]]":
    """Feed stdin lines into a queue from a daemon thread; None marks end of input."""
    lines: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
    stream = sys.stdin

    def pump() -> None:
        while True:
            line = stream.readline()
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line or None)
            except RuntimeError:
                return  # loop already closed
            if not line:
                return

    threading.Thread(target=pump, name="flashcards-input", daemon=True).start()
    return lines


async def run_study_session(engine: SessionEngine, autoplay: bool = False) -> None:
    """Interactive loop; returns on ``q`` or end of input."""
    lines = read_lines(asyncio.get_running_loop())

    def render(_state) -> None:
        print(format_view(engine.view()), flush=True)

    engine.subscribe(render)
    counts = ", ".join(f"{level.value}: {engine.store.count(level)}" for level in LEVELS)
    print(f"Cards per level - {counts}")
    print(HELP)
    render(engine.state)
    if autoplay:
        engine.toggle_autoplay()

    try:
        while True:
            print("> ", end="", flush=True)
            line = await lines.get()
            if line is None:
                break
            text = line.strip().lower()
            if text in ("q", "quit", "exit"):
                break
            if text in ("h", "help", "?"):
                print(HELP)
                continue

            command = parse_command(line)
            if command is None:
                print(f"Unknown command: {line.strip()!r}. Type h for help.")
                continue
            engine.dispatch(command)
    finally:
        engine.close()
        logger.info("Study session ended", extra={"level": engine.state.selected_level.value, "index": engine.state.current_index})
