from flask import Blueprint, current_app, jsonify

from guessroom.services.games import GameError, GameNotFound

games = Blueprint('games', __name__)


@games.route('/<string:game_id>', methods=['GET'])
def get_game_state(game_id):
    """Read-only view of a game, same projection as ``game_update``."""
    service = current_app.extensions['guessroom']['service']
    try:
        return jsonify(service.snapshot(game_id))
    except GameNotFound as exc:
        return jsonify({'error': exc.message}), 404
    except GameError as exc:
        return jsonify({'error': exc.message}), 400
