"""
Configuration partagée pour tous les tests.

- client : get_db remplacé par un MagicMock (tests de routers, services patchés)
- db     : session sur une base SQLite en mémoire, clés étrangères activées
- api    : client HTTP branché sur la session `db` (parcours de bout en bout)
- login_as : remplace l'identité de la requête par un Principal donné
"""

import uuid
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.auth.dependencies import Principal, get_current_principal
from app.config import settings
from app.database import Base, build_engine, get_db
from app.main import app
from app.models.user import Role


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """bcrypt au coût minimal : les tests n'ont pas besoin du facteur 12."""
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Usage : principal = login_as(Role.ADMIN)."""
    def _login(role: Role, user_id=None) -> Principal:
        principal = Principal(id=user_id or uuid.uuid4(), role=role)
        app.dependency_overrides[get_current_principal] = lambda: principal
        return principal

    yield _login
    app.dependency_overrides.pop(get_current_principal, None)


@pytest.fixture
def db():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def api(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
