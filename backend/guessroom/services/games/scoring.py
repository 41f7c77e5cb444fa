from guessroom.models import Game, Player


def normalize_answer(value) -> str:
    """Case-fold an answer or guess for comparison."""
    return str(value or '').lower()


def award_win(game: Game, player: Player, points: int) -> None:
    player.score += points
    game.winner_id = player.id


def consume_attempt(player: Player) -> int:
    player.attempts = max(0, player.attempts - 1)
    return player.attempts


def reset_attempts(game: Game, attempts: int) -> None:
    for player in game.players:
        player.attempts = attempts
