"""
Bracket persistence.

A bracket is stored as a flat list of game rows and rebuilt by grouping on
(bracket_type, round, match_number). Tournaments are kept as one YAML file each
under the data directory; writes go through a file lock.
"""
import os
import re
import logging
from typing import Dict, List, Optional

import yaml
from filelock import FileLock

from .models import (
    Bracket, Game, GameResult, Slot, WINNERS, LOSERS, FINAL, FINISHED, QUEUED,
    GRAND_FINAL_RESET_ID,
)

logger = logging.getLogger(__name__)

BRACKET_TYPE_ORDER = {WINNERS: 0, LOSERS: 1, FINAL: 2}


class TournamentNotFound(KeyError):
    """Raised when no stored tournament matches a slug."""


def game_to_row(game: Game) -> Dict:
    return {
        'id': game.id,
        'bracket_type': game.bracket_type,
        'round': game.round,
        'match_number': game.match_number,
        'team_a': game.team_a.to_dict(),
        'team_b': game.team_b.to_dict(),
        'status': game.status,
        'phase': game.phase,
        'paused_from': game.paused_from,
        'result': game.result.to_dict() if game.result else None,
    }


def game_from_row(row: Dict) -> Game:
    return Game(
        row['id'],
        row['bracket_type'],
        int(row['round']),
        int(row['match_number']),
        Slot.from_dict(row.get('team_a')),
        Slot.from_dict(row.get('team_b')),
        row.get('status', QUEUED),
        GameResult.from_dict(row.get('result')),
        row.get('phase', 'idle'),
        row.get('paused_from'),
    )


def bracket_to_rows(bracket: Bracket) -> List[Dict]:
    return [game_to_row(game) for game in bracket.all_games()]


def _row_rank(row: Dict) -> int:
    """Higher is better when two rows describe the same game."""
    rank = 0
    if row.get('status') == FINISHED:
        rank += 2
    if row.get('result'):
        rank += 1
    return rank


def bracket_from_rows(rows: List[Dict]) -> Bracket:
    """
    Rebuild a bracket from stored rows.

    Duplicate rows for the same position keep the one that is finished with a
    result; rounds and matches are sorted by their numbers.
    """
    best = {}
    for row in rows:
        if row.get('bracket_type') == FINAL:
            key = (FINAL, row['id'])
        else:
            key = (row['bracket_type'], int(row['round']), int(row['match_number']))
        current = best.get(key)
        if current is None or _row_rank(row) > _row_rank(current):
            if current is not None:
                logger.debug("Replacing duplicate row for %s", key)
            best[key] = row

    games = sorted(
        (game_from_row(row) for row in best.values()),
        key=lambda g: (BRACKET_TYPE_ORDER.get(g.bracket_type, 3), g.round, g.match_number),
    )

    bracket = Bracket()
    for game in games:
        if game.bracket_type == FINAL:
            if game.id == GRAND_FINAL_RESET_ID:
                bracket.grand_final_reset = game
            else:
                bracket.grand_final = game
            continue

        rounds = bracket.rounds_for(game.bracket_type)
        if not rounds or rounds[-1][0].round != game.round:
            rounds.append([])
        rounds[-1].append(game)

    return bracket


def slugify(name: str) -> str:
    """Convert tournament name to filesystem-safe slug."""
    slug = name.lower().strip()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


class TournamentStore:
    """YAML file per tournament: name, settings, teams and bracket rows."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self.tournaments_dir = os.path.join(data_dir, 'tournaments')
        self.lock = FileLock(os.path.join(data_dir, '.lock'), timeout=10)

    def _path(self, slug: str) -> str:
        return os.path.join(self.tournaments_dir, f'{slug}.yaml')

    def exists(self, slug: str) -> bool:
        return os.path.exists(self._path(slug))

    def slugs(self) -> List[str]:
        if not os.path.isdir(self.tournaments_dir):
            return []
        return sorted(f[:-len('.yaml')] for f in os.listdir(self.tournaments_dir) if f.endswith('.yaml'))

    def load(self, slug: str) -> Dict:
        path = self._path(slug)
        if not os.path.exists(path):
            raise TournamentNotFound(slug)
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not data:
            raise TournamentNotFound(slug)
        return data

    def save(self, slug: str, data: Dict):
        os.makedirs(self.tournaments_dir, exist_ok=True)
        with self.lock:
            with open(self._path(slug), 'w', encoding='utf-8') as f:
                yaml.dump(data, f, default_flow_style=False)

    def delete(self, slug: str):
        path = self._path(slug)
        if not os.path.exists(path):
            raise TournamentNotFound(slug)
        with self.lock:
            os.remove(path)

    def unique_slug(self, name: str, current: Optional[str] = None) -> str:
        base = slugify(name)
        slug = base
        counter = 2
        while self.exists(slug) and slug != current:
            slug = f'{base}-{counter}'
            counter += 1
        return slug
