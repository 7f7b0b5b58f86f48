"""
Shared test fixtures for the EcoTrack API test suite.
"""

from datetime import datetime, timezone

import pytest

from main import create_app
from utils.memory_store import MemoryStore
from utils.store import CHALLENGES


@pytest.fixture
def store():
    """Fresh in-memory record store."""
    store = MemoryStore()
    yield store
    store.close()


@pytest.fixture
def app(store):
    """Create and configure test application."""
    app = create_app('testing', store=store)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create test client for API testing."""
    return app.test_client()


@pytest.fixture
def challenge_payload():
    """Valid challenge creation body."""
    return {
        'title': 'Plastic-Free Week',
        'category': 'Waste',
        'description': 'Avoid single-use plastic for seven days.',
        'duration': 7,
        'impactMetric': 'kg plastic avoided',
        'startDate': '2024-01-01',
        'endDate': '2024-01-08'
    }


@pytest.fixture
def make_challenge(store):
    """Insert a challenge document directly into the store."""
    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        doc = {
            'title': f"Challenge {counter['n']}",
            'category': 'Energy',
            'description': 'Use less energy',
            'duration': 7,
            'target': '',
            'participants': 0,
            'impactMetric': 'kWh saved',
            'createdBy': 'admin@ecotrack.com',
            'startDate': datetime(2024, 1, counter['n'] % 28 + 1, tzinfo=timezone.utc),
            'endDate': datetime(2024, 2, 1, tzinfo=timezone.utc),
            'imageUrl': '',
            'createdAt': datetime(2024, 1, 1, 0, 0, counter['n'], tzinfo=timezone.utc),
            'updatedAt': datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        doc.update(overrides)
        return store.insert(CHALLENGES, doc)

    return _make


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: test goes through the HTTP layer"
    )
