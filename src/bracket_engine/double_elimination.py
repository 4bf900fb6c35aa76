"""
Double elimination bracket structure.

In double elimination:
- Teams must lose twice to be eliminated
- Winners Bracket: Teams that haven't lost yet
- Losers Bracket: Teams that have lost once
- Grand Final: Winners bracket champion vs Losers bracket champion
- Bracket Reset: If losers bracket winner wins Grand Final, a final match decides the champion

The losers bracket alternates between:
- Minor rounds (even indices: 0, 2, 4...): only losers bracket teams compete
- Major rounds (odd indices: 1, 3, 5...): losers from the winners bracket drop in

For an 8-team bracket:
- L Round 1 (minor): 4 W1 losers pair off -> 2 matches
- L Round 2 (major): 2 W2 losers (slot B) + 2 L1 winners (slot A) -> 2 matches
- L Round 3 (minor): 2 L2 winners pair off -> 1 match
- L Round 4 (major): W final loser (slot B) + L3 winner (slot A) -> 1 match
"""
from typing import List, Tuple

from .models import Game, LOSERS, FINAL, GRAND_FINAL_ID, GRAND_FINAL_RESET_ID, round_number


def calculate_losers_bracket_rounds(winners_rounds: int) -> int:
    """
    Number of losers bracket rounds for a winners bracket with the given
    number of rounds: 2 * (winners_rounds - 1).
    """
    if winners_rounds < 2:
        return 0
    return 2 * (winners_rounds - 1)


def target_losers_round(winners_round: int, total_winners_rounds: int) -> int:
    """
    0-indexed losers round that receives the losers of a 1-indexed winners round.

    W1 -> L1 (index 0), W2 -> L2 (index 1), W3 -> L4 (index 3), W4 -> L6 (index 5).
    The winners final feeds the last losers round. Returns -1 when no losers
    bracket exists.
    """
    if total_winners_rounds <= 1:
        return -1
    if winners_round == 1:
        return 0
    if winners_round >= total_winners_rounds:
        return calculate_losers_bracket_rounds(total_winners_rounds) - 1
    return 2 * winners_round - 3


def is_drop_in_round(losers_round_index: int) -> bool:
    return losers_round_index % 2 == 1


def losers_next_slot(losers_round_index: int, match_number: int) -> Tuple[int, int]:
    """
    Where the winner of a losers bracket game goes in the next losers round.

    Returns (next_match_number, side) with side 0 for team A and 1 for team B.
    Minor rounds feed the drop-in round one-to-one into slot A (slot B is
    reserved for the dropping winners-bracket loser); drop-in rounds halve.
    """
    if not is_drop_in_round(losers_round_index):
        return match_number, 0
    return match_number // 2, match_number % 2


def get_losers_round_name(round_num: int, total_losers_rounds: int) -> str:
    """Get the name for a losers bracket round (0-indexed)."""
    rounds_from_end = total_losers_rounds - round_num - 1
    if rounds_from_end == 0:
        return "Losers Final"
    elif rounds_from_end == 1:
        return "Losers Semifinal"
    else:
        return f"Losers Round {round_num + 1}"


def generate_losers_bracket(bracket_size: int, total_winners_rounds: int) -> List[List[Game]]:
    """
    Generate the losers bracket as fully OPEN games.

    L1 and L2 have bracket_size / 4 games; every later minor round halves.
    """
    total_losers_rounds = calculate_losers_bracket_rounds(total_winners_rounds)
    losers_bracket = []

    games_in_round = max(1, bracket_size // 4)
    for round_idx in range(total_losers_rounds):
        if round_idx >= 2 and not is_drop_in_round(round_idx):
            games_in_round = max(1, games_in_round // 2)

        round_num = round_number(round_idx)
        losers_bracket.append([
            Game(f"loser-{round_num}-{m}", LOSERS, round_num, m)
            for m in range(games_in_round)
        ])

    return losers_bracket


def generate_grand_final(total_winners_rounds: int) -> Tuple[Game, Game]:
    """
    Grand final (A: winners champion, B: losers champion) and its reset.

    The reset stays fully OPEN unless the losers champion wins the grand final.
    """
    grand_final = Game(GRAND_FINAL_ID, FINAL, total_winners_rounds, 0)
    grand_final_reset = Game(GRAND_FINAL_RESET_ID, FINAL, total_winners_rounds + 1, 0)
    return grand_final, grand_final_reset
