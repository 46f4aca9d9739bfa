"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path
from types import SimpleNamespace

# Config refuses to load without a secret key
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("FLASK_ENV", "testing")

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from app import create_app
from config import TestConfig
from extensions import db
from models import User
from blueprints.auth import generate_player_id
from blueprints.auth_helpers import generate_token
from referral.codes import assign_referral_code
from stores import get_store


@pytest.fixture
def app():
    """Fresh application with an empty in-memory database."""
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """Pushed application context for tests that call services directly.

    Do not combine with ``client``: requests would share this context.
    """
    with app.app_context():
        yield app


def _create_user(username, role="user", with_code=True, referred_by=None, **columns):
    user = User(
        username=username,
        name=username.title(),
        email=f"{username}@example.com",
        player_id=generate_player_id(),
        role=role,
        referred_by=referred_by,
        **columns,
    )
    user.set_password("secret123")
    db.session.add(user)
    db.session.commit()
    if with_code:
        assign_referral_code(user)
    return user


@pytest.fixture
def make_user(app):
    """Create a user in its own context and return a plain snapshot with auth headers."""

    def factory(username, role="user", with_code=True, referred_by=None, **columns):
        with app.app_context():
            user = _create_user(username, role=role, with_code=with_code,
                                referred_by=referred_by, **columns)
            return SimpleNamespace(
                id=user.id,
                username=user.username,
                email=user.email,
                password="secret123",
                referral_code=user.referral_code,
                headers={"Authorization": f"Bearer {generate_token(user)}"},
            )

    return factory


@pytest.fixture
def user(make_user):
    return make_user("alice")


@pytest.fixture
def admin(make_user):
    return make_user("admin", role="admin")


@pytest.fixture
def new_user():
    """Direct-model variant of make_user, for use inside ``ctx``."""
    return _create_user


@pytest.fixture
def fetch(app):
    """Re-read a row in a short-lived context; returns the requested attributes."""

    def reader(model, row_id, *attrs):
        with app.app_context():
            row = db.session.get(model, row_id)
            if row is None:
                return None
            values = [getattr(row, attr) for attr in attrs]
            return values[0] if len(values) == 1 else values

    return reader


@pytest.fixture
def set_global_terms(app):
    def setter(**values):
        with app.app_context():
            return get_store("referral").update(values)

    return setter
