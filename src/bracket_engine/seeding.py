"""
Seed placement and BYE distribution.

Placement works on "bracket orders": a list giving, for each slot position,
the 1-indexed seed that occupies it. Seeds beyond the number of teams become
the open-slot filler (BYE or OPEN).
"""
import math
import logging
from typing import List, Optional

from .models import Slot, Team, BYE

logger = logging.getLogger(__name__)

UNSEEDED = 999

# Validated snake order for an 8-slot bracket: 1v8, 4v5 on top, 2v7, 3v6 below.
_SNAKE_ORDER_8 = [1, 8, 4, 5, 2, 7, 3, 6]


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n. next_power_of_two(0) == 1."""
    if n <= 1:
        return 1
    return 2 ** math.ceil(math.log2(n))


def sort_by_seed(teams: List[Team]) -> List[Team]:
    """Sort teams by seed ascending; unseeded teams go last, keeping their order."""
    return sorted(teams, key=lambda t: t.seed if t.seed is not None else UNSEEDED)


def standard_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if bracket_size <= 1:
        return [1]
    if bracket_size == 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = standard_bracket_order(half_size)

    # Pair each upper seed with its complement
    result = []
    for seed in upper_half:
        result.extend([seed, bracket_size + 1 - seed])

    return result


def snake_bracket_order(bracket_size: int) -> List[int]:
    """
    Snake seeding: each seed pair (1,2), (3,4), ... is split across the two
    halves, alternating which half takes the better seed. Within a half,
    the best remaining seed meets the worst remaining one.
    """
    if bracket_size == 8:
        return list(_SNAKE_ORDER_8)
    return _general_snake_order(bracket_size)


def _general_snake_order(bracket_size: int) -> List[int]:
    if bracket_size <= 1:
        return [1]

    top, bottom = [], []
    for seed in range(1, bracket_size + 1):
        pair = (seed - 1) // 2
        better_of_pair = (seed - 1) % 2 == 0
        if better_of_pair != (pair % 2 == 1):
            top.append(seed)
        else:
            bottom.append(seed)

    order = []
    for half in (top, bottom):
        size = len(half)
        if size == 1:
            order.extend(half)
            continue
        for i in range(size // 2):
            order.extend([half[i], half[size - 1 - i]])
    return order


def bracket_order(bracket_size: int, strategy: str = 'standard') -> List[int]:
    if strategy == 'snake':
        return snake_bracket_order(bracket_size)
    if strategy == 'bye':
        # No dedicated bye-prioritised algorithm exists yet; BYEs already go to
        # the top seeds under standard placement.
        logger.debug("Seeding strategy 'bye' placed with the standard order")
        return standard_bracket_order(bracket_size)
    if strategy != 'standard':
        raise ValueError(f"Unknown seeding strategy: {strategy}")
    return standard_bracket_order(bracket_size)


def seed_positions(bracket_size: int, strategy: str = 'standard') -> List[int]:
    """Return the slot position of each seed: positions[seed - 1] -> slot index."""
    order = bracket_order(bracket_size, strategy)
    positions = [0] * len(order)
    for slot_index, seed in enumerate(order):
        positions[seed - 1] = slot_index
    return positions


def place_teams(teams: List[Team], bracket_size: int, strategy: str = 'standard',
                open_slot_policy: str = BYE) -> List[Slot]:
    """Place seeded teams into bracket_size slots; the rest get the open-slot filler."""
    sorted_teams = sort_by_seed(teams)
    slots = [Slot(open_slot_policy) for _ in range(bracket_size)]

    for seed_index, position in enumerate(seed_positions(bracket_size, strategy)):
        if seed_index >= len(sorted_teams):
            break
        slots[position] = Slot.team(sorted_teams[seed_index].id)

    return slots


def redistribute_byes(slots: List[Slot], total_slots: Optional[int] = None) -> List[Slot]:
    """
    Interleave teams and BYEs so BYEs are spread proportionally.

    Teams keep their relative order. Walking positions 0..total-1, a BYE is
    placed whenever the BYEs placed so far fall behind the ideal count
    floor((i + 1) * byes / total) for positions 0..i; otherwise the next team
    goes in. While BYEs do not outnumber teams this never pairs two BYEs.
    OPEN entries are kept and pushed to the end.
    """
    teams = [s for s in slots if s.is_team]
    byes = sum(1 for s in slots if s.is_bye)
    opens = sum(1 for s in slots if s.is_open)
    total = total_slots if total_slots is not None else len(teams) + byes
    total = max(total, len(teams) + byes)

    result = []
    team_idx = 0
    byes_placed = 0
    for i in range(len(teams) + byes):
        ideal = (i + 1) * byes // total
        if byes_placed < ideal or team_idx >= len(teams):
            result.append(Slot.bye())
            byes_placed += 1
        else:
            result.append(teams[team_idx])
            team_idx += 1

    result.extend(Slot.open() for _ in range(opens))
    return result


def first_round_slots(teams: List[Team], bracket_size: int, open_slot_policy: str = BYE) -> List[Slot]:
    """Slots for teams in array order, filler appended, BYEs spread out."""
    slots = [Slot.team(t.id) for t in teams[:bracket_size]]
    slots.extend(Slot(open_slot_policy) for _ in range(bracket_size - len(slots)))
    if open_slot_policy == BYE:
        return redistribute_byes(slots, bracket_size)
    return slots
