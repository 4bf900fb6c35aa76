"""
Single elimination bracket generation and the bracket builder entry point.
"""
import math
import random
import logging
from typing import List, Optional

from .models import (
    Bracket, Game, Slot, Team, TournamentSettings, WINNERS, BYE_WINNER,
    SEEDING_MODES, SEEDING_TYPES, round_number,
)
from .seeding import next_power_of_two, place_teams, first_round_slots
from .double_elimination import generate_losers_bracket, generate_grand_final, get_losers_round_name

logger = logging.getLogger(__name__)


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def total_winners_rounds(bracket_size: int) -> int:
    if bracket_size <= 1:
        return 0
    return int(math.ceil(math.log2(bracket_size)))


def generate_winners_bracket(first_round: List[Slot]) -> List[List[Game]]:
    """
    Build winners rounds by repeated halving.

    Round 1 pairs consecutive slots; every later round starts fully OPEN
    until winners are known.
    """
    rounds = []
    current_slots = first_round
    round_idx = 0

    while len(current_slots) > 1:
        round_num = round_number(round_idx)
        round_games = []
        for i in range(0, len(current_slots), 2):
            round_games.append(Game(
                f"game-{round_num}-{i // 2}",
                WINNERS,
                round_num,
                i // 2,
                current_slots[i],
                current_slots[i + 1] if i + 1 < len(current_slots) else Slot.open(),
            ))
        rounds.append(round_games)

        current_slots = [Slot.open() for _ in round_games]
        round_idx += 1

    return rounds


def build_first_round(teams: List[Team], settings: TournamentSettings,
                      seeding_mode: str = 'off', seeding_type: str = 'standard',
                      rng: Optional[random.Random] = None) -> List[Slot]:
    """Place teams into the first round slots according to the seeding mode."""
    if seeding_mode not in SEEDING_MODES:
        raise ValueError(f"Unknown seeding mode: {seeding_mode}")
    if seeding_type not in SEEDING_TYPES:
        raise ValueError(f"Unknown seeding type: {seeding_type}")

    bracket_size = next_power_of_two(len(teams))

    if seeding_mode in ('off', 'random'):
        shuffled = list(teams)
        (rng or random).shuffle(shuffled)
        return first_round_slots(shuffled, bracket_size, settings.open_slot_policy)

    return place_teams(teams, bracket_size, seeding_type, settings.open_slot_policy)


def build_bracket(teams: List[Team], settings: TournamentSettings,
                  seeding_mode: str = 'off', seeding_type: str = 'standard',
                  rng: Optional[random.Random] = None) -> Bracket:
    """
    Build a complete bracket for the roster.

    Single elimination unless settings.include_losers_bracket is set, in which
    case the losers bracket, grand final and grand final reset are added.
    """
    if any(t.id == BYE_WINNER for t in teams):
        raise ValueError(f"Team id {BYE_WINNER} is reserved for byes")

    first_round = build_first_round(teams, settings, seeding_mode, seeding_type, rng)
    winners = generate_winners_bracket(first_round)
    bracket = Bracket(winners=winners)

    if settings.include_losers_bracket and winners:
        bracket_size = len(first_round)
        bracket.losers = generate_losers_bracket(bracket_size, len(winners))
        bracket.grand_final, bracket.grand_final_reset = generate_grand_final(len(winners))

    logger.debug("Built %s for %d teams: %d winners rounds, %d losers rounds",
                 "double elimination" if bracket.is_double_elimination else "single elimination",
                 len(teams), len(bracket.winners), len(bracket.losers))
    return bracket


def get_winners_round_names(bracket: Bracket) -> List[str]:
    names = []
    for games in bracket.winners:
        names.append(get_round_name(len(games) * 2))
    if bracket.is_double_elimination:
        return [f"Winners {name}" for name in names]
    return names


def get_bracket_round_names(bracket: Bracket) -> dict:
    """Display names for every round of the bracket."""
    names = {'winners': get_winners_round_names(bracket)}
    if bracket.is_double_elimination:
        names['losers'] = [get_losers_round_name(i, len(bracket.losers)) for i in range(len(bracket.losers))]
        names['grand_final'] = "Grand Final"
        names['grand_final_reset'] = "Grand Final Reset"
    return names
