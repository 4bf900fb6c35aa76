"""
Tests for winners bracket generation and the bracket builder.
"""
import random

import pytest

from bracket_engine.models import Slot, Team, TournamentSettings, WINNERS, QUEUED, OPEN, BYE_WINNER
from bracket_engine.seeding import next_power_of_two
from bracket_engine.elimination import (
    get_round_name,
    total_winners_rounds,
    generate_winners_bracket,
    build_first_round,
    build_bracket,
    get_winners_round_names,
    get_bracket_round_names,
)
from conftest import make_teams


class TestRoundName:
    """Tests for get_round_name."""

    def test_named_rounds(self):
        assert get_round_name(2) == "Final"
        assert get_round_name(4) == "Semifinal"
        assert get_round_name(8) == "Quarterfinal"

    def test_round_of_n(self):
        assert get_round_name(16) == "Round of 16"
        assert get_round_name(32) == "Round of 32"


class TestTotalWinnersRounds:
    """Tests for total_winners_rounds."""

    def test_values(self):
        assert total_winners_rounds(1) == 0
        assert total_winners_rounds(2) == 1
        assert total_winners_rounds(8) == 3
        assert total_winners_rounds(16) == 4


class TestGenerateWinnersBracket:
    """Tests for generate_winners_bracket."""

    def test_ids_and_positions(self):
        slots = [Slot.team(f't{i}') for i in range(1, 5)]
        rounds = generate_winners_bracket(slots)
        assert [[g.id for g in r] for r in rounds] == [['game-1-0', 'game-1-1'], ['game-2-0']]
        assert rounds[0][1].team_a == Slot.team('t3')
        assert rounds[0][1].round == 1
        assert rounds[0][1].match_number == 1

    def test_later_rounds_open(self):
        rounds = generate_winners_bracket([Slot.team(f't{i}') for i in range(1, 9)])
        for games in rounds[1:]:
            for game in games:
                assert game.team_a.is_open and game.team_b.is_open
                assert game.status == QUEUED
                assert game.bracket_type == WINNERS

    def test_single_slot_has_no_games(self):
        assert generate_winners_bracket([Slot.team('t1')]) == []


class TestBuildBracket:
    """Tests for build_bracket."""

    def test_round_halving(self, single_settings):
        """Winners round i has bracket_size / 2^(i+1) games and the final has one."""
        for count in range(2, 40):
            bracket = build_bracket(make_teams(count), single_settings)
            size = next_power_of_two(count)
            for i, games in enumerate(bracket.winners):
                assert len(games) == size // (2 ** (i + 1))
            assert len(bracket.winners[-1]) == 1
            assert len(bracket.winners) == total_winners_rounds(size)

    def test_rejects_reserved_bye_id(self, single_settings):
        teams = [Team(BYE_WINNER, 'Byes FC', 1)] + make_teams(3, seeded=True)[1:]
        with pytest.raises(ValueError):
            build_bracket(teams, single_settings, 'manual', 'standard')

    def test_single_elimination_has_no_losers(self, single_settings):
        bracket = build_bracket(make_teams(8), single_settings)
        assert bracket.losers == []
        assert bracket.grand_final is None
        assert bracket.grand_final_reset is None

    def test_three_teams_end_to_end_shape(self, single_settings):
        """3 teams: size 4, one Team vs Team and one Team vs BYE in round 1."""
        bracket = build_bracket(make_teams(3), single_settings)
        first = bracket.winners[0]
        assert len(first) == 2
        kinds = sorted((g.team_a.type, g.team_b.type) for g in first)
        assert ('Team', 'Team') in kinds
        assert any(Slot.bye() in (g.team_a, g.team_b) for g in first)
        assert not any(g.is_bye_vs_bye for g in first)

    def test_every_team_placed_once(self, single_settings):
        teams = make_teams(11)
        bracket = build_bracket(teams, single_settings, rng=random.Random(3))
        placed = [tid for g in bracket.winners[0] for tid in g.team_ids()]
        assert sorted(placed) == sorted(t.id for t in teams)

    def test_random_mode_is_seedable(self, single_settings):
        a = build_bracket(make_teams(8), single_settings, 'random', rng=random.Random(7))
        b = build_bracket(make_teams(8), single_settings, 'random', rng=random.Random(7))
        assert [g.team_ids() for g in a.winners[0]] == [g.team_ids() for g in b.winners[0]]

    def test_manual_seeding_standard(self, single_settings):
        bracket = build_bracket(make_teams(8, seeded=True), single_settings, 'manual', 'standard')
        assert [g.team_ids() for g in bracket.winners[0]] == [
            ['t1', 't8'], ['t4', 't5'], ['t2', 't7'], ['t3', 't6'],
        ]

    def test_open_policy_leaves_open_slot(self):
        settings = TournamentSettings(open_slot_policy=OPEN)
        bracket = build_bracket(make_teams(3), settings)
        slots = [s for g in bracket.winners[0] for s in (g.team_a, g.team_b)]
        assert slots.count(Slot.open()) == 1

    def test_invalid_mode(self, single_settings):
        with pytest.raises(ValueError):
            build_bracket(make_teams(4), single_settings, 'lottery')

    def test_invalid_type(self, single_settings):
        with pytest.raises(ValueError):
            build_first_round(make_teams(4), single_settings, 'manual', 'swiss')

    def test_double_elimination_structure(self, double_settings):
        bracket = build_bracket(make_teams(8), double_settings)
        assert len(bracket.winners) == 3
        assert [len(r) for r in bracket.losers] == [2, 2, 1, 1]
        assert bracket.grand_final.id == 'grand-final'
        assert bracket.grand_final_reset.id == 'grand-final-reset'
        assert bracket.grand_final_reset.team_a.is_open
        assert bracket.grand_final_reset.team_b.is_open

    def test_two_team_double_elimination(self, double_settings):
        bracket = build_bracket(make_teams(2), double_settings)
        assert len(bracket.winners) == 1
        assert bracket.losers == []
        assert bracket.grand_final is not None

    def test_single_team(self, single_settings):
        bracket = build_bracket(make_teams(1), single_settings)
        assert bracket.winners == []


class TestRoundNames:
    """Tests for round name helpers."""

    def test_single_elimination(self, single_settings):
        bracket = build_bracket(make_teams(16), single_settings)
        assert get_winners_round_names(bracket) == ["Round of 16", "Quarterfinal", "Semifinal", "Final"]

    def test_double_elimination(self, double_settings):
        bracket = build_bracket(make_teams(8), double_settings)
        names = get_bracket_round_names(bracket)
        assert names['winners'] == ["Winners Quarterfinal", "Winners Semifinal", "Winners Final"]
        assert names['losers'] == ["Losers Round 1", "Losers Round 2", "Losers Semifinal", "Losers Final"]
        assert names['grand_final'] == "Grand Final"
        assert names['grand_final_reset'] == "Grand Final Reset"

    def test_single_has_no_losers_names(self, single_settings):
        names = get_bracket_round_names(build_bracket(make_teams(4), single_settings))
        assert 'losers' not in names
