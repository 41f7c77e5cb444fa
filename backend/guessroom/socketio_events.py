from functools import wraps
from typing import Dict, Optional

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from guessroom import socketio
from guessroom.services.games import GameError, normalize_game_id

CLIENT_ID_MAX_LENGTH = 64


def normalize_client_id(value):
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    if not value:
        return None
    return value[:CLIENT_ID_MAX_LENGTH]


class ConnectionTable:
    """Durable client id announced by each connection via ``hello``."""

    def __init__(self):
        self._clients: Dict[str, str] = {}

    def bind(self, sid: str, client_id: Optional[str]) -> str:
        self._clients[sid] = normalize_client_id(client_id) or sid
        return self._clients[sid]

    def resolve(self, sid: str) -> str:
        # Without a handshake the connection id doubles as the client id
        return self._clients.get(sid, sid)

    def forget(self, sid: str) -> Optional[str]:
        return self._clients.pop(sid, None)

    def __len__(self):
        return len(self._clients)


def _ext():
    return current_app.extensions['guessroom']


def _service():
    return _ext()['service']


def _get_sid() -> str:
    return request.sid  # type: ignore


def _client_id() -> str:
    return _ext()['connections'].resolve(_get_sid())


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def acknowledged(handler):
    """Turn a handler's result or failure into an ack dict.

    Errors never cross the connection boundary.
    """
    @wraps(handler)
    def wrapper(*args):
        try:
            result = handler(*args)
        except GameError as exc:
            return {'ok': False, 'error': exc.message}
        except Exception:
            current_app.logger.exception(f"[{handler.__name__}] unexpected error sid={_get_sid()}")
            return {'ok': False, 'error': 'Internal error'}
        ack = {'ok': True}
        ack.update(result or {})
        return ack
    return wrapper


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(*args):
    # Players stay in their games so the same client id can reconnect
    client_id = _ext()['connections'].forget(_get_sid())
    current_app.logger.info(f"[disconnect] sid={_get_sid()} client={client_id}")


def handle_hello(client_id=None):
    bound = _ext()['connections'].bind(_get_sid(), client_id)
    emit('hello_ack', {'clientId': bound})
    return {'clientId': bound}


@acknowledged
def handle_create_game(*args):
    game = _service().create(_client_id(), _get_sid())
    join_room(game.id)
    return {'gameId': game.id}


@acknowledged
def handle_join_game(game_id=None):
    game = _service().join(game_id, _client_id(), _get_sid())
    join_room(game.id)


@acknowledged
def handle_leave_game(game_id=None):
    _service().leave(game_id, _client_id())
    leave_room(normalize_game_id(game_id))


@acknowledged
def handle_start_game(data=None):
    data = _payload(data)
    _service().start(data.get('gameId'), _client_id(), data.get('question'), data.get('answer'))


@acknowledged
def handle_submit_guess(data=None):
    data = _payload(data)
    correct, attempts_left = _service().guess(data.get('gameId'), _client_id(), data.get('guess'))
    return {'correct': correct, 'attemptsLeft': attempts_left}


@acknowledged
def handle_send_message(data=None):
    data = _payload(data)
    _service().message(data.get('gameId'), _client_id(), data.get('text'))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('hello', handle_hello, namespace=namespace)
    socketio.on_event('create_game', handle_create_game, namespace=namespace)
    socketio.on_event('join_game', handle_join_game, namespace=namespace)
    socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('submit_guess', handle_submit_guess, namespace=namespace)
    socketio.on_event('send_message', handle_send_message, namespace=namespace)
