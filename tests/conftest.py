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
sys.path.insert(0, os.path.dirname(__file__))

from bracket.seeding import make_rng
from bracket_helpers import make_participants


@pytest.fixture
def rng():
    return make_rng(42)


@pytest.fixture
def participants():
    return make_participants(8)


@pytest.fixture
def client():
    """Create a Flask test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point every state file of the app at a temporary directory."""
    import app as app_module

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'BRACKET_FILE', str(tmp_path / 'bracket.yaml'))
    monkeypatch.setattr(app_module, 'TEAM_BRACKET_FILE', str(tmp_path / 'team_bracket.yaml'))
    monkeypatch.setattr(app_module, 'SERIES_FILE', str(tmp_path / 'best_of_three.yaml'))
    monkeypatch.setitem(app_module.app.config, 'BRACKET_SEED', None)
    return tmp_path
