"""
Tests for the bracket data model.
"""
import pytest

from bracket_engine.models import (
    Slot, Team, Game, GameResult, Bracket, TournamentSettings,
    TEAM, BYE, OPEN, WINNERS, LOSERS, FINAL, QUEUED,
    round_index, round_number,
)


class TestRoundConversion:
    """Tests for the round number / round index pair."""

    def test_round_index(self):
        assert round_index(1) == 0
        assert round_index(4) == 3

    def test_round_number(self):
        assert round_number(0) == 1
        assert round_number(3) == 4

    def test_inverse(self):
        for n in range(1, 10):
            assert round_number(round_index(n)) == n


class TestSlot:
    """Tests for Slot."""

    def test_constructors(self):
        assert Slot.team('t1').is_team
        assert Slot.bye().is_bye
        assert Slot.open().is_open

    def test_non_team_slot_drops_team_id(self):
        """Only Team slots carry a team id."""
        assert Slot(BYE, 't1').team_id is None

    def test_equality(self):
        assert Slot.team('t1') == Slot.team('t1')
        assert Slot.team('t1') != Slot.team('t2')
        assert Slot.bye() != Slot.open()

    def test_to_dict(self):
        assert Slot.team('t1').to_dict() == {'type': TEAM, 'team_id': 't1'}
        assert Slot.bye().to_dict() == {'type': BYE}

    def test_from_dict(self):
        assert Slot.from_dict({'type': TEAM, 'team_id': 't1'}) == Slot.team('t1')
        assert Slot.from_dict({'type': OPEN}) == Slot.open()
        assert Slot.from_dict(None) == Slot.open()

    def test_from_dict_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            Slot.from_dict({'type': 'Ghost'})

    def test_from_dict_requires_team_id(self):
        with pytest.raises(ValueError):
            Slot.from_dict({'type': TEAM})


class TestGame:
    """Tests for Game helpers."""

    def test_defaults(self):
        game = Game('g', WINNERS, 1, 0)
        assert game.team_a.is_open and game.team_b.is_open
        assert game.status == QUEUED
        assert game.phase == 'idle'
        assert game.round_index == 0

    def test_loser_id_team_vs_team(self):
        game = Game('g', WINNERS, 1, 0, Slot.team('a'), Slot.team('b'))
        assert game.loser_id('a') == 'b'
        assert game.loser_id('b') == 'a'

    def test_loser_id_bye_never_loses(self):
        """A BYE opponent is never routed as a loser."""
        game = Game('g', WINNERS, 1, 0, Slot.team('a'), Slot.bye())
        assert game.loser_id('a') is None

    def test_loser_id_unknown_winner(self):
        game = Game('g', WINNERS, 1, 0, Slot.team('a'), Slot.team('b'))
        assert game.loser_id('zzz') is None

    def test_slot_flags(self):
        game = Game('g', LOSERS, 1, 0, Slot.bye(), Slot.bye())
        assert game.is_bye_vs_bye
        assert game.has_bye
        assert not game.has_open_slot
        assert game.team_ids() == []


class TestGameResult:
    """Tests for GameResult serialization."""

    def test_round_trip(self):
        result = GameResult('a', 21, 15, '2026-01-01T10:00:00', 'Alpha', 'Beta')
        restored = GameResult.from_dict(result.to_dict())
        assert restored.winner_id == 'a'
        assert (restored.score_a, restored.score_b) == (21, 15)
        assert restored.team_a_name == 'Alpha'

    def test_from_empty(self):
        assert GameResult.from_dict(None) is None


class TestTeam:
    """Tests for Team serialization."""

    def test_seed_omitted_when_none(self):
        assert Team('t1', 'One').to_dict() == {'id': 't1', 'name': 'One'}

    def test_from_dict(self):
        team = Team.from_dict({'id': 't1', 'name': 'One', 'seed': 3})
        assert team.seed == 3


class TestTournamentSettings:
    """Tests for TournamentSettings."""

    def test_defaults(self):
        settings = TournamentSettings()
        assert settings.game_length_minutes == 20
        assert settings.warmup_minutes == 5
        assert settings.flex_minutes == 5
        assert settings.number_of_courts == 1
        assert settings.open_slot_policy == BYE
        assert settings.include_losers_bracket is False

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            TournamentSettings(open_slot_policy='Team')

    @pytest.mark.parametrize("kwargs", [
        {'number_of_courts': 0},
        {'number_of_courts': '2'},
        {'warmup_minutes': -1},
        {'game_length_minutes': 12.5},
        {'flex_minutes': True},
    ])
    def test_invalid_durations(self, kwargs):
        with pytest.raises(ValueError):
            TournamentSettings(**kwargs)

    def test_from_dict_ignores_unknown_keys(self):
        settings = TournamentSettings.from_dict({'flex_minutes': 8, 'colour': 'red'})
        assert settings.flex_minutes == 8


class TestBracket:
    """Tests for Bracket traversal."""

    def test_all_games_order(self):
        w = [[Game('w1', WINNERS, 1, 0)]]
        l = [[Game('l1', LOSERS, 1, 0)]]
        gf = Game('grand-final', FINAL, 2, 0)
        reset = Game('grand-final-reset', FINAL, 3, 0)
        bracket = Bracket(w, l, gf, reset)
        assert [g.id for g in bracket.all_games()] == ['w1', 'l1', 'grand-final', 'grand-final-reset']
        assert bracket.is_double_elimination

    def test_find_game(self):
        bracket = Bracket([[Game('w1', WINNERS, 1, 0)]])
        assert bracket.find_game('w1').id == 'w1'
        assert bracket.find_game('nope') is None
        assert not bracket.is_double_elimination

    def test_rounds_for(self):
        bracket = Bracket([[Game('w1', WINNERS, 1, 0)]])
        assert bracket.rounds_for(WINNERS) is bracket.winners
        assert bracket.rounds_for(LOSERS) is bracket.losers
        assert bracket.rounds_for(FINAL) == []
