from datetime import date, timedelta

import pytest

from fitchallenge import create_app
from fitchallenge.extensions import db as _db
from fitchallenge.services import challenges as challenge_service
from fitchallenge.services import users as user_service

PASSWORD = "secret123"


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def make_user(app):
    def _make_user(name="Ana", email=None, password=PASSWORD, role="participant"):
        email = email or f"{name.lower()}@example.com"
        return user_service.register_user(name, email, password, role=role)
    return _make_user


@pytest.fixture
def make_challenge(app):
    def _make_challenge(creator, **overrides):
        data = {
            "title": "Spring push-ups",
            "description": "One hundred sets before summer",
            "start_date": date.today() - timedelta(days=1),
            "end_date": date.today() + timedelta(days=10),
            "goal_count": 4,
            "group_goal": None,
            "prize": None,
            "penalty": None,
        }
        data.update(overrides)
        return challenge_service.create_challenge(creator, data)
    return _make_challenge


def login(client, email, password=PASSWORD):
    return client.post("/login", data={"email": email, "password": password})


@pytest.fixture
def login_as(app):
    """Return a fresh test client logged in as the given user."""
    def _login_as(user, password=PASSWORD):
        client = app.test_client()
        response = login(client, user.email, password)
        assert response.headers["Location"].endswith("/dashboard")
        return client
    return _login_as


def flashes(client):
    """Pending flash messages as (category, message) pairs."""
    with client.session_transaction() as session:
        return list(session.get("_flashes", []))
