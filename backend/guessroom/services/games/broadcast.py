import logging

from guessroom.models import Game

GAME_UPDATE = 'game_update'


class Broadcaster:
    """Deliver the sanitized game state to everyone in a game.

    Two channels are used: the Socket.IO room named by the game id, then
    every player's last-known connection. A client still in the room gets
    the update twice; clients de-duplicate by content. Delivery is best
    effort and failures never reach the caller.
    """

    def __init__(self, socketio, namespace='/', logger=None):
        self.socketio = socketio
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)

    def broadcast(self, game: Game) -> None:
        payload = game.to_dict()
        self._emit(payload, game.id, game.id)
        for player in game.players:
            if player.connection_id:
                self._emit(payload, player.connection_id, game.id)

    def _emit(self, payload, to, game_id):
        try:
            self.socketio.emit(GAME_UPDATE, payload, to=to, namespace=self.namespace)
        except Exception as exc:
            self.logger.warning(f"[broadcast-failed] game={game_id} to={to} error={exc}")
