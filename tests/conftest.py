"""
FlickPick — Shared pytest fixtures.
"""

from __future__ import annotations

import os
import secrets
from datetime import date
from typing import Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ─── Environment setup (before any app imports) ───────────────────────────────

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", secrets.token_hex(32))
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1000")

# ─── App imports (after env is set) ───────────────────────────────────────────

from flickpick.core.security import PasswordHasher, TokenService  # noqa: E402
from flickpick.database import Base  # noqa: E402
from flickpick.models.movies import Movie  # noqa: E402
from flickpick.models.users import User  # noqa: E402

# ─────────────────────────────────────────────────────────────────────────────
# DATABASE FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


def _make_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_pragmas(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session — fresh for every test function."""
    engine = _make_engine()
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# ─────────────────────────────────────────────────────────────────────────────
# SECURITY FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=1000)


@pytest.fixture(scope="session")
def token_service() -> TokenService:
    return TokenService(secret=secrets.token_hex(32))


# ─────────────────────────────────────────────────────────────────────────────
# FASTAPI CLIENT FIXTURE
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with overridden DB dependency."""
    from flickpick.database import get_db
    from flickpick.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client: TestClient):
    """Build Authorization headers for any username, signed by the app's key."""

    def _headers(username: str) -> Dict[str, str]:
        return bearer(client.app.state.token_service.issue(username))

    return _headers


# ─────────────────────────────────────────────────────────────────────────────
# CATALOG / USER FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def movies(db_session: Session) -> List[Movie]:
    catalog = [
        Movie(
            title="Inception",
            description="A thief who steals corporate secrets through dream-sharing.",
            genre_name="Science Fiction",
            genre_description="Speculative fiction built on imagined science.",
            director_name="Christopher Nolan",
            director_bio="British-American filmmaker.",
            actors=["Leonardo DiCaprio", "Elliot Page"],
            image_path="inception.png",
            featured=True,
        ),
        Movie(
            title="Amélie",
            description="A shy waitress decides to change the lives of those around her.",
            genre_name="Comedy",
            genre_description="Films intended to make the audience laugh.",
            director_name="Jean-Pierre Jeunet",
            director_bio="French film director.",
            actors=["Audrey Tautou"],
            featured=False,
        ),
    ]
    db_session.add_all(catalog)
    db_session.commit()
    return catalog


@pytest.fixture
def kim(db_session: Session) -> User:
    from flickpick.main import app

    user = User(
        username="Kim",
        email="kim@example.com",
        password_hash=app.state.password_hasher.hash("s3cret!"),
        birthday=date(1990, 5, 17),
    )
    db_session.add(user)
    db_session.commit()
    return user
