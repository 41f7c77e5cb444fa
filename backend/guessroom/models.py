import time
from dataclasses import dataclass, field
from typing import List, Optional

WAITING = 'waiting'
IN_PROGRESS = 'in-progress'
ENDED = 'ended'

GUESS = 'guess'
CHAT = 'chat'


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Player:
    id: str
    connection_id: Optional[str] = None
    score: int = 0
    is_game_master: bool = False
    attempts: int = 3

    def to_dict(self):
        # connection_id stays server-side
        return {
            'id': self.id,
            'score': self.score,
            'isGameMaster': self.is_game_master,
            'attempts': self.attempts,
        }


@dataclass
class Message:
    sender_id: str
    text: str
    timestamp: int = field(default_factory=now_ms)
    kind: str = CHAT

    def to_dict(self):
        return {
            'senderId': self.sender_id,
            'text': self.text,
            'timestamp': self.timestamp,
            'kind': self.kind,
        }


@dataclass
class Game:
    id: str
    game_master_id: str
    players: List[Player] = field(default_factory=list)
    question: str = ''
    answer: str = ''
    status: str = WAITING
    winner_id: Optional[str] = None
    created_at: int = field(default_factory=now_ms)
    start_time: Optional[int] = None
    messages: List[Message] = field(default_factory=list)
    # Round timer only; the pending ended -> waiting rotation lives apart
    timer_handle: Optional[object] = None
    rotation_handle: Optional[object] = None

    def find_player(self, client_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == client_id:
                return player
        return None

    def game_master_index(self) -> int:
        for idx, player in enumerate(self.players):
            if player.id == self.game_master_id:
                return idx
        return -1

    def assign_game_master(self, index: int) -> None:
        """Make ``players[index]`` the only Game Master."""
        for idx, player in enumerate(self.players):
            player.is_game_master = idx == index
        self.game_master_id = self.players[index].id

    def to_dict(self):
        """Sanitized projection sent to clients.

        The answer, timer handles and player connection ids are never exposed.
        """
        return {
            'id': self.id,
            'gameMasterId': self.game_master_id,
            'players': [p.to_dict() for p in self.players],
            'question': self.question,
            'status': self.status,
            'winnerId': self.winner_id,
            'createdAt': self.created_at,
            'startTime': self.start_time,
            'messages': [m.to_dict() for m in self.messages],
        }
