"""Game domain services: registry, state machine, scoring and timers.

This package holds the transport-independent game logic used by the
Socket.IO handlers and HTTP routes, keeping Socket.IO concerns separated
from core game mechanics.
"""

from .broadcast import Broadcaster
from .engine import GameService
from .errors import (
    Forbidden,
    GameError,
    GameInProgress,
    GameNotFound,
    InvalidInput,
    InvalidState,
    NoAttemptsLeft,
    NotAPlayer,
)
from .registry import GameRegistry, generate_game_id, normalize_game_id
from .scheduler import BackgroundScheduler, TimerHandle
