"""
Finishing games and the cascades they trigger.

Finishing one game can unlock further work: a completed winners round
finalizes its losers bracket feed, BYE markers can unbalance the next winners
round, and any game left facing a BYE finishes itself. All of that runs through
a single Cascade work queue so that a cascade never re-enters itself and the
caller receives one ordered list of events describing what happened.
"""
import logging
from collections import deque
from datetime import datetime
from typing import Dict, List, Optional

from .models import (
    Bracket, Game, GameResult, Slot, WINNERS, LOSERS, QUEUED, FINISHED,
    BYE_WINNER, GRAND_FINAL_RESET_ID,
)
from .advancement import advance, winner_slot
from .double_elimination import target_losers_round, is_drop_in_round
from .seeding import redistribute_byes
from .config import MAX_RESOLVE_ITERATIONS

logger = logging.getLogger(__name__)


def is_round_complete(games: List[Game]) -> bool:
    return bool(games) and all(g.is_finished for g in games)


def slot_name(slot: Slot, team_names: Optional[Dict[str, str]] = None) -> str:
    """Display name frozen into a result for one side of a game."""
    if slot.is_team:
        return (team_names or {}).get(slot.team_id, 'Unknown')
    if slot.is_bye:
        return 'BYE'
    return 'TBD'


def finalize_losers_round(bracket: Bracket, winners_round: int) -> List[dict]:
    """
    Close the losers bracket round fed by a completed winners round.

    Slots that were waiting on a winners bracket loser and never received one
    become BYEs. For winners round 1 both sides of every losers round 1 game are
    fed from the winners bracket, so both are converted (an OPEN vs OPEN ghost
    game becomes BYE vs BYE). Later rounds only convert slot B, since slot A
    belongs to the previous losers round winner. Safe to call repeatedly.
    """
    if not bracket.losers:
        return []

    target_idx = target_losers_round(winners_round, len(bracket.winners))
    if target_idx < 0 or target_idx >= len(bracket.losers):
        return []

    converted = []
    for game in bracket.losers[target_idx]:
        if game.status != QUEUED:
            continue
        changed = False
        if not is_drop_in_round(target_idx):
            if game.team_a.is_open:
                game.team_a = Slot.bye()
                changed = True
        if game.team_b.is_open:
            game.team_b = Slot.bye()
            changed = True
        if changed:
            converted.append(game.id)

    if not converted:
        return []

    logger.debug("Finalized losers round %d after winners round %d: %s",
                 target_idx + 1, winners_round, converted)
    return [{
        'type': 'LosersRoundFinalized',
        'winners_round': winners_round,
        'losers_round': target_idx + 1,
        'games': converted,
    }]


def rebalance_winners_round(bracket: Bracket, round_idx: int) -> List[dict]:
    """
    Re-pair a winners round from the winners of the round before it.

    Used when BYE markers advanced out of BYE vs BYE games: the feeding
    winners (teams and BYEs, in match order) are spread out again so two BYEs
    do not meet while a team is left waiting. Only runs while every feeding
    game is finished and the target round has not started.
    """
    if round_idx <= 0 or round_idx >= len(bracket.winners):
        return []

    feeding = bracket.winners[round_idx - 1]
    target = bracket.winners[round_idx]
    if not is_round_complete(feeding):
        return []
    if any(g.status != QUEUED for g in target):
        return []

    winners = []
    for game in feeding:
        if game.result is None:
            return []
        winners.append(winner_slot(game.result.winner_id))

    if not any(s.is_bye for s in winners):
        return []

    slots = redistribute_byes(winners, len(winners))
    for i, game in enumerate(target):
        game.team_a = slots[2 * i] if 2 * i < len(slots) else Slot.open()
        game.team_b = slots[2 * i + 1] if 2 * i + 1 < len(slots) else Slot.open()

    logger.debug("Rebalanced winners round %d: %s", round_idx + 1, slots)
    return [{'type': 'RoundRebalanced', 'round': round_idx + 1}]


def _previous_round_finished(bracket: Bracket, game: Game) -> bool:
    if game.bracket_type in (WINNERS, LOSERS):
        rounds = bracket.rounds_for(game.bracket_type)
        if game.round_index == 0:
            return True
        return is_round_complete(rounds[game.round_index - 1])

    if game.id == GRAND_FINAL_RESET_ID:
        return bracket.grand_final is not None and bracket.grand_final.is_finished
    if bracket.winners and not is_round_complete(bracket.winners[-1]):
        return False
    if bracket.losers and not is_round_complete(bracket.losers[-1]):
        return False
    return True


def is_auto_resolvable(bracket: Bracket, game: Game) -> bool:
    """A queued game with no OPEN slot, at least one BYE, and a finished previous round."""
    if game.status != QUEUED:
        return False
    if game.has_open_slot or not game.has_bye:
        return False
    return _previous_round_finished(bracket, game)


class Cascade:
    """
    Work queue that applies game results and drains every consequence.

    Results are queued and processed by a single top-level loop. A result
    submitted while the loop is already running is only queued, so nested
    submissions never start a second loop. Once the queue is empty the bracket
    is scanned for games that can finish against a BYE; each scan counts as
    one iteration and the loop stops at max_iterations.
    """

    def __init__(self, bracket: Bracket, team_names: Optional[Dict[str, str]] = None,
                 max_iterations: int = MAX_RESOLVE_ITERATIONS, finished_at: Optional[str] = None):
        self.bracket = bracket
        self.team_names = team_names or {}
        self.max_iterations = max_iterations
        self.finished_at = finished_at
        self.events: List[dict] = []
        self.running = False
        self._queue = deque()

    def submit(self, game: Game, winner_id: str, score_a=0, score_b=0, auto=False):
        self._queue.append((game, winner_id, score_a, score_b, auto))
        if not self.running:
            self.run()

    def run(self):
        if self.running:
            return
        self.running = True
        try:
            iterations = 0
            while True:
                while self._queue:
                    self._apply(*self._queue.popleft())

                if iterations >= self.max_iterations:
                    if any(is_auto_resolvable(self.bracket, g) for g in self.bracket.all_games()):
                        logger.warning("Bye resolution stopped after %d iterations", iterations)
                    break
                iterations += 1

                ready = [g for g in self.bracket.all_games() if is_auto_resolvable(self.bracket, g)]
                if not ready:
                    break
                for game in ready:
                    self._queue.append(_bye_result(game))
        finally:
            self.running = False

    def _apply(self, game: Game, winner_id: str, score_a, score_b, auto):
        if game.is_finished:
            return

        game.result = GameResult(
            winner_id,
            score_a,
            score_b,
            self.finished_at or datetime.now().isoformat(timespec='seconds'),
            slot_name(game.team_a, self.team_names),
            slot_name(game.team_b, self.team_names),
        )
        game.status = FINISHED
        game.phase = 'idle'
        game.paused_from = None

        self.events.append({
            'type': 'ByeResolved' if auto else 'GameFinished',
            'game_id': game.id,
            'winner_id': winner_id,
            'score_a': score_a,
            'score_b': score_b,
        })
        self.events.extend(advance(game, winner_id, self.bracket))

        if game.bracket_type == WINNERS and is_round_complete(self.bracket.winners[game.round_index]):
            self.events.extend(finalize_losers_round(self.bracket, game.round))
            self.events.extend(rebalance_winners_round(self.bracket, game.round_index + 1))


def _bye_result(game: Game):
    if game.is_bye_vs_bye:
        return game, BYE_WINNER, 0, 0, True
    if game.team_a.is_team:
        return game, game.team_a.team_id, 1, 0, True
    return game, game.team_b.team_id, 0, 1, True


def resolve_byes(bracket: Bracket, team_names: Optional[Dict[str, str]] = None,
                 max_iterations: int = MAX_RESOLVE_ITERATIONS) -> List[dict]:
    """Finish every game that can be decided by a BYE, until nothing changes."""
    cascade = Cascade(bracket, team_names, max_iterations)
    cascade.run()
    return cascade.events


def finish_game(bracket: Bracket, game_id: str, winner_id: str, score_a=0, score_b=0,
                team_names: Optional[Dict[str, str]] = None, finished_at: Optional[str] = None,
                max_iterations: int = MAX_RESOLVE_ITERATIONS) -> List[dict]:
    """
    Record a result and run the resulting cascade.

    Returns the events produced, or an empty list when the result cannot be
    applied (unknown or already finished game, an OPEN slot, or a winner that
    is not one of the game's sides).
    """
    game = bracket.find_game(game_id)
    if game is None:
        logger.debug("finish_game: unknown game %s", game_id)
        return []
    if game.is_finished:
        logger.debug("finish_game: %s is already finished", game_id)
        return []
    if game.has_open_slot:
        logger.debug("finish_game: %s still has an open slot", game_id)
        return []

    valid_winners = set(game.team_ids())
    if game.is_bye_vs_bye:
        valid_winners.add(BYE_WINNER)
    if winner_id not in valid_winners:
        logger.debug("finish_game: %s is not playing in %s", winner_id, game_id)
        return []

    cascade = Cascade(bracket, team_names, max_iterations, finished_at)
    cascade.submit(game, winner_id, score_a, score_b)
    return cascade.events
