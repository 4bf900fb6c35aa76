"""
Tests for settings loading and logging configuration.
"""
import logging

import pytest
import yaml

from bracket_engine.models import BYE, OPEN
from bracket_engine.config import get_default_settings, load_settings, configure_logging, MAX_RESOLVE_ITERATIONS


class TestDefaultSettings:
    """Tests for get_default_settings."""

    def test_values(self):
        assert get_default_settings() == {
            'game_length_minutes': 20,
            'warmup_minutes': 5,
            'flex_minutes': 5,
            'number_of_courts': 1,
            'open_slot_policy': BYE,
            'include_losers_bracket': False,
        }

    def test_returns_fresh_dict(self):
        get_default_settings()['flex_minutes'] = 99
        assert get_default_settings()['flex_minutes'] == 5

    def test_resolve_cap(self):
        assert MAX_RESOLVE_ITERATIONS == 50


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "nope.yaml"))
        assert settings.to_dict() == get_default_settings()

    def test_no_path(self):
        assert load_settings().to_dict() == get_default_settings()

    def test_overlay(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({'open_slot_policy': OPEN, 'number_of_courts': 3, 'unknown': 1}))
        settings = load_settings(str(path))
        assert settings.open_slot_policy == OPEN
        assert settings.number_of_courts == 3
        assert settings.game_length_minutes == 20

    def test_empty_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(str(path)).to_dict() == get_default_settings()

    def test_invalid_policy(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({'open_slot_policy': 'maybe'}))
        with pytest.raises(ValueError):
            load_settings(str(path))


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_level_name(self):
        logger = logging.getLogger('bracket_engine')
        try:
            configure_logging('debug')
            assert logger.level == logging.DEBUG
            configure_logging(logging.WARNING)
            assert logger.level == logging.WARNING
        finally:
            logger.setLevel(logging.NOTSET)
