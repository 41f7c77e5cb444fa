class GameError(Exception):
    """Base class for rejected game operations.

    The message is what clients see in ``{"ok": false, "error": ...}``.
    """

    default_message = 'Game error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class GameNotFound(GameError):
    default_message = 'Game not found'


class Forbidden(GameError):
    default_message = 'Only GM can start'


class InvalidState(GameError):
    default_message = 'Game not in progress'


class InvalidInput(GameError):
    default_message = 'Invalid input'


class GameInProgress(GameError):
    default_message = 'Game already in progress'


class NotAPlayer(GameError):
    default_message = 'Player not in game'


class NoAttemptsLeft(GameError):
    default_message = 'No attempts left'
