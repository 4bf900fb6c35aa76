"""
Manual bracket edits made by an organiser.

These write slots directly and bypass advancement. Only queued games can be
edited; a game that has started or finished keeps its slots.
"""
from typing import Union

from .models import Bracket, Game, Slot, QUEUED
from .lifecycle import GameStateError

SIDES = {'A': 0, 'B': 1, 0: 0, 1: 1}


def _side_index(side: Union[str, int]) -> int:
    key = side.upper() if isinstance(side, str) else side
    if key not in SIDES:
        raise ValueError(f"Unknown side: {side}")
    return SIDES[key]


def set_slot(bracket: Bracket, game_id: str, side: Union[str, int], slot: Slot) -> Game:
    """Set one side of a queued game to a team, BYE or OPEN."""
    game = bracket.find_game(game_id)
    if game is None:
        raise KeyError(game_id)
    if game.status != QUEUED:
        raise GameStateError(f"Game {game_id} is {game.status} and cannot be edited")

    if _side_index(side) == 0:
        game.team_a = slot
    else:
        game.team_b = slot
    return game


def assign_open_to_bye(bracket: Bracket, bracket_type: str, round_idx: int) -> int:
    """Turn every OPEN slot of a round's queued games into a BYE. Returns the number changed."""
    rounds = bracket.rounds_for(bracket_type)
    if round_idx < 0 or round_idx >= len(rounds):
        return 0

    changed = 0
    for game in rounds[round_idx]:
        if game.status != QUEUED:
            continue
        if game.team_a.is_open:
            game.team_a = Slot.bye()
            changed += 1
        if game.team_b.is_open:
            game.team_b = Slot.bye()
            changed += 1
    return changed


def clear_round(bracket: Bracket, bracket_type: str, round_idx: int) -> int:
    """Reset both slots of a round's queued games to OPEN. Returns the number of games cleared."""
    rounds = bracket.rounds_for(bracket_type)
    if round_idx < 0 or round_idx >= len(rounds):
        return 0

    cleared = 0
    for game in rounds[round_idx]:
        if game.status != QUEUED:
            continue
        game.team_a = Slot.open()
        game.team_b = Slot.open()
        cleared += 1
    return cleared
