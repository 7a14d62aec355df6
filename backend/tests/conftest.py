"""
Pytest fixtures for OmniMarket backend tests.

Provides an in-memory application, a storage reset per test and a CLI runner.
"""

import pytest

from omnimarket import create_app
from omnimarket.extensions import db
from omnimarket.models import Actor, StorageEntry


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SEED_STARTER_CATALOG': True,
        'DEFAULT_LOW_STOCK_LIMIT': 10,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def storage(app):
    """Empty key-value store for each test; the starter catalog appears on first read."""
    db.session.query(StorageEntry).delete()
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def runner(app, storage):
    """CLI runner sharing the test app."""
    return app.test_cli_runner()


@pytest.fixture
def cashier():
    return Actor(name="Ani", branch_id="B001")
