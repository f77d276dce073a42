import pytest

from app import create_app
from app.extensions import db
from app.services import Engine
from config import TestConfig


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def engine(app):
    with app.app_context():
        yield Engine(db.session)


@pytest.fixture
def store(engine):
    return engine.store


@pytest.fixture
def identity(engine):
    return engine.identity


@pytest.fixture
def authorizer(engine):
    return engine.authz


@pytest.fixture
def grading(engine):
    return engine.grading


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def do_login(username, password):
        return client.post("/auth/login",
                           data={"username": username, "password": password})
    return do_login
