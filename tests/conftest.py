import random

import pytest

from secret_exchange import create_app
from secret_exchange.extensions import db
from secret_exchange.services.contacts import ContactMatcher


# Cheap argon2 settings; production defaults are far higher.
FAST_HASH = {"CONTACT_HASH_ROUNDS": 1, "CONTACT_HASH_MEMORY_COST": 64}


class IdentityRng:
    """randrange(n) always picks the last index, so every shuffle is the identity."""

    def __init__(self):
        self.calls = 0

    def randrange(self, n):
        self.calls += 1
        return n - 1


def make_app(core=None, **overrides):
    config = {
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "LOG_LEVEL": "WARNING",
        **FAST_HASH,
        **overrides,
    }
    return create_app(config, core=core)


@pytest.fixture
def app():
    app = make_app()
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def ctx(app):
    """An app context for calling services directly. Not shared with client requests."""
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def matcher():
    return ContactMatcher(rounds=1, memory_cost=64)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def event(client):
    resp = client.post("/api/admin/events", json={"name": "Office party", "budget": 25})
    assert resp.status_code == 200
    return resp.get_json()


@pytest.fixture
def auth(event):
    return {"Authorization": f"Bearer {event['organizerToken']}"}
