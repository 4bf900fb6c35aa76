"""
Game status machine.

    Queued -> Warmup -> Live -> Flex (-> overtime phase) -> Finished
    Warmup / Live / Flex -> Paused -> back to the phase it paused from

Finishing is handled by resolution.finish_game, which accepts any unfinished
game with both slots decided.
"""
from typing import Optional

from .models import Game, TournamentSettings, QUEUED, WARMUP, LIVE, FLEX, PAUSED

PAUSABLE = (WARMUP, LIVE, FLEX)


class GameStateError(ValueError):
    """Raised for a transition that is not allowed from the game's current status."""


def start_game(game: Game) -> Game:
    if game.status != QUEUED:
        raise GameStateError(f"Game {game.id} cannot start from {game.status}")
    if game.has_open_slot:
        raise GameStateError(f"Game {game.id} has an undecided slot")
    game.status = WARMUP
    game.phase = 'warmup'
    return game


def next_phase(game: Game) -> Game:
    """Skip to the next stage: warmup -> game -> flex -> overtime."""
    if game.status == WARMUP:
        game.status = LIVE
        game.phase = 'game'
    elif game.status == LIVE:
        game.status = FLEX
        game.phase = 'flex'
    elif game.status == FLEX and game.phase == 'flex':
        # Overtime keeps the Flex status
        game.phase = 'overtime'
    else:
        raise GameStateError(f"Game {game.id} has no next phase from {game.status}/{game.phase}")
    return game


def pause_game(game: Game) -> Game:
    if game.status not in PAUSABLE:
        raise GameStateError(f"Game {game.id} cannot be paused from {game.status}")
    game.paused_from = game.status
    game.status = PAUSED
    return game


def resume_game(game: Game) -> Game:
    if game.status != PAUSED or game.paused_from not in PAUSABLE:
        raise GameStateError(f"Game {game.id} is not paused")
    game.status = game.paused_from
    game.paused_from = None
    return game


def phase_minutes(game: Game, settings: TournamentSettings) -> Optional[int]:
    """Scheduled length of the game's current phase; None when it is open-ended."""
    return {
        'warmup': settings.warmup_minutes,
        'game': settings.game_length_minutes,
        'flex': settings.flex_minutes,
    }.get(game.phase)
