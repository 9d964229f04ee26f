"""
Flashcard study session: navigation, flip state, swipe gestures and autoplay,
composed by :class:`SessionEngine`.
"""

from .autoplay import AutoplayPhase, AutoplayScheduler
from .commands import (
    Command,
    Next,
    Previous,
    SelectLevel,
    SetIndex,
    Shuffle,
    StopAutoplay,
    Tap,
    ToggleAutoplay,
)
from .engine import CardView, SessionEngine, SessionSettings, SessionState
from .flip import CardFace, FlipController
from .gestures import GestureDetector
from .navigation import NavigationController, clamp
from .timers import AsyncioTimer, TimerHandle, TimerPort

__all__ = [
    "AutoplayPhase",
    "AutoplayScheduler",
    "Command",
    "Next",
    "Previous",
    "SelectLevel",
    "SetIndex",
    "Shuffle",
    "StopAutoplay",
    "Tap",
    "ToggleAutoplay",
    "CardView",
    "SessionEngine",
    "SessionSettings",
    "SessionState",
    "CardFace",
    "FlipController",
    "GestureDetector",
    "NavigationController",
    "clamp",
    "AsyncioTimer",
    "TimerHandle",
    "TimerPort",
]
