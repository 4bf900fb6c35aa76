"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.models import Team, TournamentSettings


def make_teams(count, seeded=False):
    """Teams t1..tN named 'Team 1'..'Team N'; seeded teams get seed == index."""
    return [
        Team(f"t{i}", f"Team {i}", i if seeded else None)
        for i in range(1, count + 1)
    ]


@pytest.fixture
def teams_factory():
    return make_teams


@pytest.fixture
def single_settings():
    """Single elimination, BYE open-slot policy."""
    return TournamentSettings()


@pytest.fixture
def double_settings():
    """Double elimination, BYE open-slot policy."""
    return TournamentSettings(include_losers_bracket=True)


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at a temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return str(data_dir)


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
