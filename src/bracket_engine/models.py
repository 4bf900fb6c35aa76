"""
Data model for elimination brackets.

A Bracket is the single mutable aggregate: winners rounds, losers rounds,
an optional grand final and an optional grand final reset. Slots reference
teams by id only, so deleting a team never corrupts an already-played result.
"""
from typing import List, Dict, Optional, Iterator

# Slot types
TEAM = 'Team'
BYE = 'BYE'
OPEN = 'OPEN'

# Synthetic winner id used when a BYE advances out of a BYE vs BYE game
BYE_WINNER = 'BYE'

# Bracket types
WINNERS = 'W'
LOSERS = 'L'
FINAL = 'Final'

# Game statuses
QUEUED = 'Queued'
WARMUP = 'Warmup'
LIVE = 'Live'
FLEX = 'Flex'
PAUSED = 'Paused'
FINISHED = 'Finished'

# Seeding
SEEDING_MODES = ('off', 'random', 'manual', 'upload')
SEEDING_TYPES = ('standard', 'snake', 'bye')

GRAND_FINAL_ID = 'grand-final'
GRAND_FINAL_RESET_ID = 'grand-final-reset'


def round_index(round_number: int) -> int:
    """Convert a 1-indexed round number to its 0-indexed array position."""
    return round_number - 1


def round_number(round_index: int) -> int:
    """Convert a 0-indexed array position to its 1-indexed round number."""
    return round_index + 1


class Slot:
    def __init__(self, type, team_id=None):
        self.type = type
        self.team_id = team_id if type == TEAM else None

    @classmethod
    def team(cls, team_id):
        return cls(TEAM, team_id)

    @classmethod
    def bye(cls):
        return cls(BYE)

    @classmethod
    def open(cls):
        return cls(OPEN)

    @property
    def is_team(self):
        return self.type == TEAM

    @property
    def is_bye(self):
        return self.type == BYE

    @property
    def is_open(self):
        return self.type == OPEN

    def to_dict(self) -> Dict:
        if self.is_team:
            return {'type': TEAM, 'team_id': self.team_id}
        return {'type': self.type}

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'Slot':
        if not data:
            return cls.open()
        slot_type = data.get('type', OPEN)
        if slot_type not in (TEAM, BYE, OPEN):
            raise ValueError(f"Unknown slot type: {slot_type}")
        if slot_type == TEAM and not data.get('team_id'):
            raise ValueError("Team slot requires a team_id")
        return cls(slot_type, data.get('team_id'))

    def __eq__(self, other):
        if not isinstance(other, Slot):
            return NotImplemented
        return self.type == other.type and self.team_id == other.team_id

    def __hash__(self):
        return hash((self.type, self.team_id))

    def __repr__(self):
        if self.is_team:
            return f"Slot(Team, {self.team_id})"
        return f"Slot({self.type})"


class Team:
    def __init__(self, id, name, seed=None):
        self.id = id
        self.name = name
        self.seed = seed

    def to_dict(self) -> Dict:
        data = {'id': self.id, 'name': self.name}
        if self.seed is not None:
            data['seed'] = self.seed
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Team':
        return cls(data['id'], data['name'], data.get('seed'))

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, seed={self.seed})"


class GameResult:
    """Outcome of a finished game. Team names are frozen at finish time."""

    def __init__(self, winner_id, score_a=0, score_b=0, finished_at=None,
                 team_a_name=None, team_b_name=None):
        self.winner_id = winner_id
        self.score_a = score_a
        self.score_b = score_b
        self.finished_at = finished_at
        self.team_a_name = team_a_name
        self.team_b_name = team_b_name

    def to_dict(self) -> Dict:
        return {
            'winner_id': self.winner_id,
            'score_a': self.score_a,
            'score_b': self.score_b,
            'finished_at': self.finished_at,
            'team_a_name': self.team_a_name,
            'team_b_name': self.team_b_name,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional['GameResult']:
        if not data:
            return None
        return cls(
            data['winner_id'],
            data.get('score_a', 0),
            data.get('score_b', 0),
            data.get('finished_at'),
            data.get('team_a_name'),
            data.get('team_b_name'),
        )

    def __repr__(self):
        return f"GameResult(winner_id={self.winner_id}, score={self.score_a}-{self.score_b})"


class Game:
    def __init__(self, id, bracket_type, round, match_number, team_a=None, team_b=None,
                 status=QUEUED, result=None, phase='idle', paused_from=None):
        self.id = id
        self.bracket_type = bracket_type
        self.round = round
        self.match_number = match_number
        self.team_a = team_a if team_a is not None else Slot.open()
        self.team_b = team_b if team_b is not None else Slot.open()
        self.status = status
        self.result = result
        # Timer phase: idle, warmup, game, flex or overtime
        self.phase = phase
        self.paused_from = paused_from

    @property
    def round_index(self) -> int:
        return round_index(self.round)

    @property
    def is_finished(self) -> bool:
        return self.status == FINISHED

    @property
    def has_open_slot(self) -> bool:
        return self.team_a.is_open or self.team_b.is_open

    @property
    def has_bye(self) -> bool:
        return self.team_a.is_bye or self.team_b.is_bye

    @property
    def is_bye_vs_bye(self) -> bool:
        return self.team_a.is_bye and self.team_b.is_bye

    def team_ids(self) -> List[str]:
        return [s.team_id for s in (self.team_a, self.team_b) if s.is_team]

    def loser_id(self, winner_id) -> Optional[str]:
        """Return the id of the real team that lost to winner_id, if any.

        A BYE never loses in a way that routes anywhere.
        """
        if self.team_a.is_team and self.team_a.team_id == winner_id:
            return self.team_b.team_id if self.team_b.is_team else None
        if self.team_b.is_team and self.team_b.team_id == winner_id:
            return self.team_a.team_id if self.team_a.is_team else None
        return None

    def __repr__(self):
        return (f"Game(id={self.id}, {self.bracket_type}{self.round}-M{self.match_number}, "
                f"{self.team_a} vs {self.team_b}, status={self.status})")


class TournamentSettings:
    def __init__(self, game_length_minutes=20, warmup_minutes=5, flex_minutes=5,
                 number_of_courts=1, open_slot_policy=BYE, include_losers_bracket=False):
        if open_slot_policy not in (BYE, OPEN):
            raise ValueError(f"open_slot_policy must be {BYE} or {OPEN}, got {open_slot_policy}")
        for field, value in (('game_length_minutes', game_length_minutes), ('warmup_minutes', warmup_minutes),
                             ('flex_minutes', flex_minutes), ('number_of_courts', number_of_courts)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{field} must be a non-negative integer, got {value!r}")
        if number_of_courts < 1:
            raise ValueError("number_of_courts must be at least 1")
        self.game_length_minutes = game_length_minutes
        self.warmup_minutes = warmup_minutes
        self.flex_minutes = flex_minutes
        self.number_of_courts = number_of_courts
        self.open_slot_policy = open_slot_policy
        self.include_losers_bracket = include_losers_bracket

    def to_dict(self) -> Dict:
        return {
            'game_length_minutes': self.game_length_minutes,
            'warmup_minutes': self.warmup_minutes,
            'flex_minutes': self.flex_minutes,
            'number_of_courts': self.number_of_courts,
            'open_slot_policy': self.open_slot_policy,
            'include_losers_bracket': self.include_losers_bracket,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'TournamentSettings':
        data = data or {}
        known = cls().to_dict()
        return cls(**{k: v for k, v in data.items() if k in known})

    def __repr__(self):
        return f"TournamentSettings({self.to_dict()})"


class Bracket:
    def __init__(self, winners=None, losers=None, grand_final=None, grand_final_reset=None):
        self.winners: List[List[Game]] = winners if winners is not None else []
        self.losers: List[List[Game]] = losers if losers is not None else []
        self.grand_final: Optional[Game] = grand_final
        self.grand_final_reset: Optional[Game] = grand_final_reset

    @property
    def is_double_elimination(self) -> bool:
        return self.grand_final is not None

    def rounds_for(self, bracket_type) -> List[List[Game]]:
        if bracket_type == WINNERS:
            return self.winners
        if bracket_type == LOSERS:
            return self.losers
        return []

    def all_games(self) -> Iterator[Game]:
        for rounds in (self.winners, self.losers):
            for games in rounds:
                yield from games
        if self.grand_final is not None:
            yield self.grand_final
        if self.grand_final_reset is not None:
            yield self.grand_final_reset

    def find_game(self, game_id) -> Optional[Game]:
        for game in self.all_games():
            if game.id == game_id:
                return game
        return None

    def __repr__(self):
        return (f"Bracket(winners={len(self.winners)} rounds, losers={len(self.losers)} rounds, "
                f"grand_final={self.grand_final is not None})")
