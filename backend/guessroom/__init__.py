from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from guessroom.config import Config

socketio = SocketIO(async_mode=None)


def _cors_origins(config):
    origins = config.get('CORS_ALLOWED_ORIGINS') or '*'
    if origins == ['*']:
        return '*'
    return origins


def create_app(config_class=Config, scheduler=None, broadcaster=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _cors_origins(flask_app.config)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from guessroom.services.games import BackgroundScheduler, Broadcaster, GameRegistry, GameService
    from guessroom.socketio_events import ConnectionTable, register_socketio_handlers

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    registry = GameRegistry(
        id_length=int(flask_app.config.get('GAME_ID_LENGTH', 6)),
        max_id_attempts=int(flask_app.config.get('GAME_ID_MAX_ATTEMPTS', 20)),
    )
    service = GameService.from_config(
        flask_app.config,
        registry,
        broadcaster or Broadcaster(socketio, namespace=namespace, logger=flask_app.logger),
        scheduler or BackgroundScheduler(
            socketio, logger=flask_app.logger, tick=float(flask_app.config.get('TIMER_TICK_SEC', 1.0))),
        logger=flask_app.logger,
    )
    flask_app.extensions['guessroom'] = {
        'registry': registry,
        'service': service,
        'connections': ConnectionTable(),
    }

    from guessroom.main import main
    flask_app.register_blueprint(main)

    from guessroom.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    register_socketio_handlers(namespace=namespace)

    return flask_app
