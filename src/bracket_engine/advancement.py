"""
Slot advancement: propagate a finished game's outcome downstream.

Every write overwrites a target slot that is computed purely from the source
game's position, so applying the same result twice leaves the bracket unchanged.
"""
import logging
from typing import List, Optional, Tuple

from .models import (
    Bracket, Game, Slot, WINNERS, LOSERS, FINAL, QUEUED, BYE_WINNER,
    GRAND_FINAL_RESET_ID,
)
from .double_elimination import target_losers_round, losers_next_slot

logger = logging.getLogger(__name__)


def winner_slot(winner_id: str) -> Slot:
    """Slot written downstream for a winner; the BYE marker advances as a BYE."""
    if winner_id == BYE_WINNER:
        return Slot.bye()
    return Slot.team(winner_id)


def _write(game: Game, side: int, slot: Slot):
    if side == 0:
        game.team_a = slot
    else:
        game.team_b = slot


def _next_winners_target(game: Game, bracket: Bracket) -> Optional[Tuple[Game, int]]:
    next_idx = game.round_index + 1
    if next_idx >= len(bracket.winners):
        return None
    next_round = bracket.winners[next_idx]
    next_match = game.match_number // 2
    if next_match >= len(next_round):
        return None
    return next_round[next_match], game.match_number % 2


def _next_losers_target(game: Game, bracket: Bracket) -> Optional[Tuple[Game, int]]:
    next_match, side = losers_next_slot(game.round_index, game.match_number)
    next_idx = game.round_index + 1
    if next_idx >= len(bracket.losers):
        return None
    next_round = bracket.losers[next_idx]
    if next_match >= len(next_round):
        return None
    return next_round[next_match], side


def advance(game: Game, winner_id: str, bracket: Bracket) -> List[dict]:
    """
    Write the winner (and, in the winners bracket, the loser) of a finished
    game into the correct downstream slots. Returns the events produced.
    """
    if not winner_id:
        logger.debug("No winner for %s; nothing to advance", game.id)
        return []
    if winner_id == BYE_WINNER:
        if not game.is_bye_vs_bye:
            logger.debug("BYE cannot win %s; nothing to advance", game.id)
            return []
    elif winner_id not in game.team_ids():
        logger.debug("%s is not playing in %s; nothing to advance", winner_id, game.id)
        return []

    events = []
    slot = winner_slot(winner_id)

    if game.bracket_type == WINNERS:
        target = _next_winners_target(game, bracket)
        if target is not None:
            next_game, side = target
            _write(next_game, side, slot)
            events.append(_advanced(game, winner_id, next_game, side))
        elif game.round_index == len(bracket.winners) - 1 and bracket.grand_final is not None:
            bracket.grand_final.team_a = slot
            events.append(_advanced(game, winner_id, bracket.grand_final, 0))
        events.extend(route_loser(game, winner_id, bracket))

    elif game.bracket_type == LOSERS:
        if game.round_index >= len(bracket.losers) - 1:
            if bracket.grand_final is not None:
                bracket.grand_final.team_b = slot
                events.append(_advanced(game, winner_id, bracket.grand_final, 1))
        else:
            target = _next_losers_target(game, bracket)
            if target is not None:
                next_game, side = target
                _write(next_game, side, slot)
                events.append(_advanced(game, winner_id, next_game, side))

    elif game.bracket_type == FINAL and game.id != GRAND_FINAL_RESET_ID:
        events.extend(activate_reset(game, winner_id, bracket))

    return events


def route_loser(game: Game, winner_id: str, bracket: Bracket) -> List[dict]:
    """Drop the loser of a winners bracket game into the losers bracket."""
    loser_id = game.loser_id(winner_id)
    if loser_id is None:
        return []

    total_winners = len(bracket.winners)

    if not bracket.losers:
        # Two-team double elimination: the losers final is the grand final itself
        if bracket.grand_final is not None and game.round == total_winners:
            bracket.grand_final.team_b = Slot.team(loser_id)
            return [_dropped(game, loser_id, bracket.grand_final, 1)]
        return []

    target_idx = target_losers_round(game.round, total_winners)
    if target_idx < 0 or target_idx >= len(bracket.losers):
        return []
    target_round = bracket.losers[target_idx]

    if game.round == 1:
        target = target_round[game.match_number // 2] if game.match_number // 2 < len(target_round) else None
        if target is None:
            return []
        side = game.match_number % 2
        _write(target, side, Slot.team(loser_id))
        return [_dropped(game, loser_id, target, side)]

    loser_slot = Slot.team(loser_id)
    for candidate in target_round:
        if loser_slot in (candidate.team_a, candidate.team_b):
            return []

    if game.round == total_winners:
        candidates = [(g, 1) for g in target_round] + [(g, 0) for g in target_round]
    else:
        # Slot A of a drop-in round is reserved for the previous losers round winner
        preferred = target_round[game.match_number] if game.match_number < len(target_round) else None
        candidates = [(preferred, 1)] if preferred is not None else []
        candidates += [(g, 1) for g in target_round]

    for candidate, side in candidates:
        current = candidate.team_a if side == 0 else candidate.team_b
        if current.is_open:
            _write(candidate, side, loser_slot)
            return [_dropped(game, loser_id, candidate, side)]

    logger.warning("No open losers bracket slot for loser %s of %s", loser_id, game.id)
    return []


def activate_reset(grand_final: Game, winner_id: str, bracket: Bracket) -> List[dict]:
    """Populate the reset game when the losers champion (team B) wins the grand final."""
    reset = bracket.grand_final_reset
    if reset is None:
        return []
    if not (grand_final.team_b.is_team and grand_final.team_b.team_id == winner_id):
        return []

    reset.team_a = grand_final.team_a
    reset.team_b = grand_final.team_b
    reset.status = QUEUED
    return [{
        'type': 'ResetActivated',
        'game_id': reset.id,
        'team_a': reset.team_a.team_id,
        'team_b': reset.team_b.team_id,
    }]


def champion(bracket: Bracket) -> Optional[str]:
    """Return the tournament winner's id once it is decided."""
    if not bracket.winners:
        return None

    if not bracket.is_double_elimination:
        final = bracket.winners[-1][0]
        if final.is_finished and final.result and final.result.winner_id != BYE_WINNER:
            return final.result.winner_id
        return None

    reset = bracket.grand_final_reset
    if reset is not None and reset.is_finished and reset.result:
        return reset.result.winner_id

    grand_final = bracket.grand_final
    if grand_final.is_finished and grand_final.result:
        winner_id = grand_final.result.winner_id
        if grand_final.team_a.is_team and grand_final.team_a.team_id == winner_id:
            return winner_id
        # A BYE holding slot B means the winners champion won outright
        if grand_final.team_b.is_bye and winner_id != BYE_WINNER:
            return winner_id
    return None


def _advanced(game: Game, winner_id: str, target: Game, side: int) -> dict:
    return {
        'type': 'ByeAdvanced' if winner_id == BYE_WINNER else 'TeamAdvanced',
        'from_game': game.id,
        'team_id': winner_id,
        'to_game': target.id,
        'side': 'A' if side == 0 else 'B',
    }


def _dropped(game: Game, loser_id: str, target: Game, side: int) -> dict:
    return {
        'type': 'TeamDropped',
        'from_game': game.id,
        'team_id': loser_id,
        'to_game': target.id,
        'side': 'A' if side == 0 else 'B',
    }
