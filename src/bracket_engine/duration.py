"""
Tournament duration estimate.

Rounds run one after another; the games of a round share the courts, so a
round takes as many game slots as it needs rows of courts. The losers bracket
is estimated after the winners bracket, followed by the grand final. The grand
final reset is not counted.
"""
import math
from datetime import datetime, timedelta
from typing import List, Optional

from .models import TournamentSettings
from .seeding import next_power_of_two
from .elimination import total_winners_rounds
from .double_elimination import generate_losers_bracket

ROUND_TRANSITION_MINUTES = 2
MIN_BUFFER_MINUTES = 15
BUFFER_RATIO = 0.05


def winners_games_per_round(num_teams: int) -> List[int]:
    """Games actually played in each winners round; round 1 excludes games against a BYE."""
    if num_teams < 2:
        return []
    bracket_size = next_power_of_two(num_teams)
    games = [num_teams - bracket_size // 2]
    for round_idx in range(1, total_winners_rounds(bracket_size)):
        games.append(bracket_size // (2 ** (round_idx + 1)))
    return games


def losers_games_per_round(num_teams: int) -> List[int]:
    """
    Games actually played in each losers round, assuming first-round byes are
    spread so that no two played winners games feed the same losers game
    unless they have to.
    """
    if num_teams < 3:
        return []
    bracket_size = next_power_of_two(num_teams)
    winners_rounds = total_winners_rounds(bracket_size)
    sizes = [len(r) for r in generate_losers_bracket(bracket_size, winners_rounds)]

    round_one_losers = num_teams - bracket_size // 2
    games = list(sizes)
    games[0] = max(0, round_one_losers - sizes[0])
    if len(games) > 1:
        games[1] = min(sizes[1], round_one_losers)
    return games


def format_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    text = f"{hours} hour{'s' if hours != 1 else ''}"
    if minutes:
        text += f" {minutes} minute{'s' if minutes != 1 else ''}"
    return text


def _rounds_minutes(games_per_round: List[int], courts: int, minutes_per_game: int) -> int:
    played = [g for g in games_per_round if g > 0]
    total = sum(math.ceil(g / courts) * minutes_per_game for g in played)
    return total + ROUND_TRANSITION_MINUTES * max(0, len(played) - 1)


def calculate_tournament_duration(num_teams: int, settings: TournamentSettings) -> dict:
    """
    Estimate how long a tournament takes.

    Returns total_minutes, total_hours, formatted, games_count and rounds_count.
    Each game slot is warmup + game + flex minutes. A buffer of 5% (at least
    15 minutes) is added on top.
    """
    if num_teams < 2:
        return {
            'total_minutes': 0,
            'total_hours': 0,
            'formatted': format_minutes(0),
            'games_count': 0,
            'rounds_count': 0,
        }

    courts = max(1, settings.number_of_courts)
    minutes_per_game = settings.warmup_minutes + settings.game_length_minutes + settings.flex_minutes

    winners = winners_games_per_round(num_teams)
    games_count = sum(winners)
    rounds_count = len(winners)
    minutes = _rounds_minutes(winners, courts, minutes_per_game)

    if settings.include_losers_bracket:
        losers = losers_games_per_round(num_teams)
        games_count += sum(losers) + 1
        rounds_count += len(losers) + 1
        if any(losers):
            minutes += ROUND_TRANSITION_MINUTES + _rounds_minutes(losers, courts, minutes_per_game)
        minutes += ROUND_TRANSITION_MINUTES + minutes_per_game

    minutes += max(MIN_BUFFER_MINUTES, math.ceil(minutes * BUFFER_RATIO))

    return {
        'total_minutes': minutes,
        'total_hours': minutes // 60,
        'formatted': format_minutes(minutes),
        'games_count': games_count,
        'rounds_count': rounds_count,
    }


def estimated_completion(started: str, num_teams: int, settings: TournamentSettings) -> Optional[str]:
    """ISO timestamp at which a tournament started at `started` should end."""
    if not started:
        return None
    start = datetime.fromisoformat(started)
    duration = calculate_tournament_duration(num_teams, settings)
    return (start + timedelta(minutes=duration['total_minutes'])).isoformat(timespec='seconds')
