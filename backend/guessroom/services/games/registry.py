import random
import string
from typing import Dict, Iterator, Optional

from guessroom.models import Game

GAME_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_game_id(length=6):
    """Generate a short, human-typeable game id."""
    return ''.join(random.choices(GAME_ID_ALPHABET, k=length))


def normalize_game_id(value):
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    return value.strip().upper() or None


class GameRegistry:
    """In-memory mapping of game id to :class:`Game`.

    Owns the lifecycle of every game object. Callers serialize access
    through :class:`GameService`.
    """

    def __init__(self, id_length=6, max_id_attempts=20):
        self._games: Dict[str, Game] = {}
        self.id_length = id_length
        self.max_id_attempts = max_id_attempts

    def new_id(self) -> str:
        for _ in range(self.max_id_attempts):
            game_id = generate_game_id(self.id_length)
            if game_id not in self._games:
                return game_id
        raise RuntimeError('Unable to allocate a unique game id')

    def add(self, game: Game) -> Game:
        self._games[game.id] = game
        return game

    def get(self, game_id) -> Optional[Game]:
        return self._games.get(normalize_game_id(game_id))

    def remove(self, game_id) -> Optional[Game]:
        return self._games.pop(normalize_game_id(game_id), None)

    def __contains__(self, game_id) -> bool:
        return normalize_game_id(game_id) in self._games

    def __len__(self) -> int:
        return len(self._games)

    def __iter__(self) -> Iterator[Game]:
        return iter(list(self._games.values()))
