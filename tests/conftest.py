import random

import pytest
from starlette.testclient import TestClient

from guestbook.app.context import AppContext
from guestbook.config import AppConfig, Environment
from guestbook.main import create_app
from guestbook.persistence import GuestTable


@pytest.fixture
def config():
    config = AppConfig.for_environment(Environment.TESTING)
    config.security.secret_key = "test-secret-key"
    return config


@pytest.fixture
def store():
    return GuestTable()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def context(config, store, rng):
    return AppContext.create(config, store=store, rng=rng)


@pytest.fixture
def app(config, store):
    return create_app(config, store=store, rng=random.Random(7))


@pytest.fixture
def client(app):
    return TestClient(app)
