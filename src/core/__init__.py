"""Lobe Labyrinth Core Engine"""
__version__ = "0.1.0"

from src.core.content import ContentStore
from src.core.errors import (
    DataError,
    GameError,
    InvalidMove,
    InvalidTimerTransition,
    NoQuestionsAvailable,
    PersistenceError,
    StateError,
)
from src.core.event_bus import EventBus
from src.core.game import GameSession
from src.core.rules import DEFAULT_RULES, GameRules

__all__ = [
    "ContentStore",
    "DataError",
    "GameError",
    "InvalidMove",
    "InvalidTimerTransition",
    "NoQuestionsAvailable",
    "PersistenceError",
    "StateError",
    "EventBus",
    "GameSession",
    "DEFAULT_RULES",
    "GameRules",
]
