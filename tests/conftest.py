"""
Test configuration: in-memory SQLite app per test, a frozen clock, and
small factories for trainers, dogs and stored assignments.
"""

from datetime import timedelta

import pytest

from domain.assignments import store
from domain.dogs import services as dog_services
from domain.trainers import services as trainer_services
from infrastructure.db.init_db import init_db
from infrastructure.db.repository import Repository
from kennel import create_app
from kennel.config import ProgramRules
from kennel.extensions import db
from kennel.utils import dates
from tests.helpers import WEEK0


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        init_db()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def repo(app):
    return Repository()


@pytest.fixture
def rules(app):
    return ProgramRules.current()


@pytest.fixture
def today(monkeypatch):
    """Freeze the clock. Call the fixture value with a date to move it."""
    def freeze(value):
        monkeypatch.setattr(dates, "today_utc", lambda: value)
        return value

    freeze(WEEK0 + timedelta(days=2))
    return freeze


@pytest.fixture
def make_trainer(repo):
    def _make(name="Trainer"):
        return trainer_services.create_trainer(repo, name)
    return _make


@pytest.fixture
def make_dog(repo, today):
    def _make(name="Dog", initial_training_weeks=0, recall_week_start_date=None):
        return dog_services.create_dog(
            repo, name,
            initial_training_weeks=initial_training_weeks,
            recall_week_start_date=recall_week_start_date,
        )
    return _make


@pytest.fixture
def assign(repo):
    """Store a row directly, skipping capacity checks, and commit it."""
    def _assign(dog, week_start, trainer=None, type="training"):
        row = store.upsert(repo, dog.id, week_start, trainer.id if trainer else None, type)
        repo.session.commit()
        return row
    return _assign
