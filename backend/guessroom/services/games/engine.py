import logging
import threading
from typing import Optional, Tuple

from guessroom.models import ENDED, GUESS, IN_PROGRESS, WAITING, CHAT, Game, Message, Player, now_ms
from .errors import Forbidden, GameInProgress, GameNotFound, InvalidInput, InvalidState, NoAttemptsLeft, NotAPlayer
from .registry import GameRegistry, normalize_game_id
from .scheduler import TimerHandle
from .scoring import award_win, consume_attempt, normalize_answer, reset_attempts

ROUND = 'round'
ROTATION = 'rotation'


class GameService:
    """Game session state machine.

    Every public operation runs under one re-entrant lock, so inbound
    events and timer callbacks never interleave mid-mutation. Ordering
    races (a timeout against a winning guess, a late guess after the round
    ended) are settled by the status checks in :meth:`guess` and
    :meth:`start` and by :meth:`end` being a no-op outside ``in-progress``.
    """

    def __init__(self, registry: GameRegistry, broadcaster, scheduler, logger=None,
                 round_duration=60, rotation_delay=3, min_players=2,
                 max_attempts=3, points_per_win=10):
        self.registry = registry
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.logger = logger or logging.getLogger(__name__)
        self.round_duration = round_duration
        self.rotation_delay = rotation_delay
        self.min_players = min_players
        self.max_attempts = max_attempts
        self.points_per_win = points_per_win
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config, registry, broadcaster, scheduler, logger=None):
        return cls(
            registry,
            broadcaster,
            scheduler,
            logger=logger,
            round_duration=int(config.get('ROUND_DURATION_SEC', 60)),
            rotation_delay=int(config.get('ROTATION_DELAY_SEC', 3)),
            min_players=int(config.get('MIN_PLAYERS', 2)),
            max_attempts=int(config.get('MAX_ATTEMPTS', 3)),
            points_per_win=int(config.get('POINTS_PER_WIN', 10)),
        )

    # ---- lookups ----

    def get(self, game_id) -> Game:
        if not normalize_game_id(game_id):
            raise InvalidInput('No game id')
        game = self.registry.get(game_id)
        if game is None:
            raise GameNotFound()
        return game

    def snapshot(self, game_id) -> dict:
        with self._lock:
            return self.get(game_id).to_dict()

    # ---- operations ----

    def create(self, client_id: str, connection_id: Optional[str]) -> Game:
        with self._lock:
            game_id = self.registry.new_id()
            owner = Player(id=client_id, connection_id=connection_id,
                           is_game_master=True, attempts=self.max_attempts)
            game = self.registry.add(Game(id=game_id, game_master_id=client_id, players=[owner]))
            self.logger.info(f"[create_game] client={client_id} game={game_id}")
            self.broadcaster.broadcast(game)
            return game

    def join(self, game_id, client_id: str, connection_id: Optional[str]) -> Game:
        with self._lock:
            game = self.get(game_id)
            if game.status == IN_PROGRESS:
                raise GameInProgress()
            existing = game.find_player(client_id)
            if existing:
                existing.connection_id = connection_id
                self.logger.info(f"[join_game] client={client_id} rejoined game={game.id}")
            else:
                game.players.append(Player(id=client_id, connection_id=connection_id,
                                           attempts=self.max_attempts))
                self.logger.info(f"[join_game] client={client_id} joined game={game.id}")
            self.broadcaster.broadcast(game)
            return game

    def leave(self, game_id, client_id: str) -> Optional[Game]:
        """Remove a player; returns None when the game was deleted."""
        with self._lock:
            game = self.get(game_id)
            game.players = [p for p in game.players if p.id != client_id]
            if not game.players:
                self._delete(game)
                return None
            if game.game_master_id == client_id:
                game.assign_game_master(0)
                self.logger.info(f"[leave_game] game={game.id} gm reassigned to {game.game_master_id}")
            self.logger.info(f"[leave_game] client={client_id} left game={game.id}")
            self.broadcaster.broadcast(game)
            return game

    def start(self, game_id, client_id: str, question, answer) -> Game:
        with self._lock:
            game = self.get(game_id)
            if game.game_master_id != client_id:
                raise Forbidden()
            if len(game.players) < self.min_players:
                raise InvalidState(f'At least {self.min_players} players required')
            if not question or not answer:
                raise InvalidInput('Question and answer required')
            if game.status == ENDED:
                raise InvalidState('Round is ending')

            if game.status == IN_PROGRESS:
                # a restart drops the abandoned question's guesses and chat
                game.messages = []
            reset_attempts(game, self.max_attempts)
            game.question = str(question)
            game.answer = normalize_answer(answer)
            game.status = IN_PROGRESS
            game.start_time = now_ms()
            game.winner_id = None
            self._cancel(game.timer_handle)
            game.timer_handle = self.scheduler.call_later(
                game.id, ROUND, self.round_duration, self._on_round_timeout)
            self.logger.info(f"[start_game] game={game.id} gm={client_id} players={len(game.players)}")
            self.broadcaster.broadcast(game)
            return game

    def guess(self, game_id, client_id: str, text) -> Tuple[bool, int]:
        """Submit a guess; returns ``(correct, attempts_left)``."""
        with self._lock:
            game = self.get(game_id)
            if game.status != IN_PROGRESS:
                raise InvalidState('Game not in progress')
            player = game.find_player(client_id)
            if player is None:
                raise NotAPlayer()
            if player.attempts <= 0:
                raise NoAttemptsLeft()

            normalized = normalize_answer(text)
            game.messages.append(Message(sender_id=client_id, text=normalized, kind=GUESS))
            if normalized == game.answer:
                award_win(game, player, self.points_per_win)
                self.logger.info(f"[submit_guess] game={game.id} winner={client_id} score={player.score}")
                self.end(game.id, 'win')
                self.broadcaster.broadcast(game)
                return True, player.attempts

            attempts_left = consume_attempt(player)
            self.broadcaster.broadcast(game)
            return False, attempts_left

    def message(self, game_id, client_id: str, text) -> Game:
        with self._lock:
            game = self.get(game_id)
            game.messages.append(Message(sender_id=client_id, text='' if text is None else str(text), kind=CHAT))
            self.broadcaster.broadcast(game)
            return game

    def end(self, game_id, reason: str = 'timeout') -> bool:
        """End the running round. Returns False when there was nothing to end."""
        with self._lock:
            game = self.registry.get(game_id)
            if game is None or game.status != IN_PROGRESS:
                return False
            self._cancel(game.timer_handle)
            game.timer_handle = None
            game.status = ENDED
            if reason != 'win':
                game.winner_id = None
            self.logger.info(f"[end_game] game={game.id} reason={reason} winner={game.winner_id}")
            self.broadcaster.broadcast(game)
            self._cancel(game.rotation_handle)
            game.rotation_handle = self.scheduler.call_later(
                game.id, ROTATION, self.rotation_delay, self._on_rotation_due)
            return True

    def rotate(self, game_id) -> Optional[Game]:
        """Hand the GM role to the next player and reset for a new round."""
        with self._lock:
            game = self.registry.get(game_id)
            if game is None:
                return None
            game.rotation_handle = None
            if not game.players:
                self._delete(game)
                return None
            next_index = (game.game_master_index() + 1) % len(game.players)
            game.assign_game_master(next_index)
            reset_attempts(game, self.max_attempts)
            game.status = WAITING
            game.winner_id = None
            game.question = ''
            game.answer = ''
            game.start_time = None
            game.messages = []
            self.logger.info(f"[rotate] game={game.id} gm={game.game_master_id}")
            self.broadcaster.broadcast(game)
            return game

    # ---- timers ----

    def _on_round_timeout(self, handle: TimerHandle) -> None:
        with self._lock:
            game = self.registry.get(handle.game_id)
            if handle.cancelled or game is None or game.timer_handle is not handle:
                return
            handle.fired = True
            self.end(game.id, 'timeout')

    def _on_rotation_due(self, handle: TimerHandle) -> None:
        with self._lock:
            game = self.registry.get(handle.game_id)
            if handle.cancelled or game is None or game.rotation_handle is not handle:
                return
            handle.fired = True
            self.rotate(game.id)

    @staticmethod
    def _cancel(handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    def _delete(self, game: Game) -> None:
        self._cancel(game.timer_handle)
        self._cancel(game.rotation_handle)
        game.timer_handle = None
        game.rotation_handle = None
        self.registry.remove(game.id)
        self.logger.info(f"[delete_game] game={game.id}")
