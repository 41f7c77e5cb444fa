import os


def _origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ALLOWED_ORIGINS = _origins(os.environ.get('CORS_ALLOWED_ORIGINS', '*'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Round timers (seconds)
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '60'))
    ROTATION_DELAY_SEC = int(os.environ.get('ROTATION_DELAY_SEC', '3'))
    # Sleep slice for timer workers; cancelled timers exit within one slice
    TIMER_TICK_SEC = float(os.environ.get('TIMER_TICK_SEC', '1'))
    # Gameplay rules
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_ATTEMPTS = int(os.environ.get('MAX_ATTEMPTS', '3'))
    POINTS_PER_WIN = int(os.environ.get('POINTS_PER_WIN', '10'))
    # Game id generation
    GAME_ID_LENGTH = int(os.environ.get('GAME_ID_LENGTH', '6'))
    GAME_ID_MAX_ATTEMPTS = int(os.environ.get('GAME_ID_MAX_ATTEMPTS', '20'))
