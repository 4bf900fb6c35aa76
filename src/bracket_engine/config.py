"""
Settings defaults, YAML settings loading and environment overrides.
"""
import os
import logging
import yaml

from .models import TournamentSettings, BYE

BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LOG_LEVEL = os.environ.get('BRACKET_LOG_LEVEL', 'INFO')

# Safety cap for the bye auto-resolution loop
MAX_RESOLVE_ITERATIONS = 50

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def get_default_settings():
    """Return default tournament settings."""
    return {
        'game_length_minutes': 20,
        'warmup_minutes': 5,
        'flex_minutes': 5,
        'number_of_courts': 1,
        'open_slot_policy': BYE,
        'include_losers_bracket': False,
    }


def load_settings(path=None) -> TournamentSettings:
    """Load settings from a YAML file, merging with defaults."""
    data = get_default_settings()
    if path and os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f)
        if loaded:
            for key, value in loaded.items():
                if key in data:
                    data[key] = value
    return TournamentSettings.from_dict(data)


def configure_logging(level=None):
    """Install a basic stderr handler for command line use."""
    level = level or LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('bracket_engine').setLevel(level)
