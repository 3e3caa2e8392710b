# tests/conftest.py

import os

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from twistlist.auth.auth_utils import hash_password
from twistlist.database.base import Base
from twistlist.database.session import get_db
from twistlist.main import app
from twistlist.models import User, Team, Project, ProjectTeam, Task

from .helpers import TEST_PASSWORD


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


# ── Factories ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def password_hash():
    # Hashed once per run
    return hash_password(TEST_PASSWORD)


@pytest.fixture()
def make_user(db, password_hash):
    def _make(username: str, team: Team | None = None) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=password_hash,
            team_id=team.id if team else None,
        )
        db.add(user)
        db.flush()
        return user
    return _make


@pytest.fixture()
def make_team(db):
    def _make(name: str = "Eng", *members: User) -> Team:
        team = Team(team_name=name)
        db.add(team)
        db.flush()
        for member in members:
            member.team_id = team.id
        db.flush()
        return team
    return _make


@pytest.fixture()
def make_project(db):
    def _make(name: str, *teams: Team) -> Project:
        project = Project(name=name)
        db.add(project)
        db.flush()
        for team in teams:
            db.add(ProjectTeam(project_id=project.id, team_id=team.id))
        db.flush()
        db.refresh(project)
        return project
    return _make


@pytest.fixture()
def make_task(db):
    def _make(project: Project, author: User, assignee: User | None = None, **fields) -> Task:
        task = Task(
            title=fields.pop("title", "A task"),
            project_id=project.id,
            author_user_id=author.id,
            assigned_user_id=assignee.id if assignee else None,
            **fields,
        )
        db.add(task)
        db.flush()
        return task
    return _make


# ── HTTP ─────────────────────────────────────────────────────────


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # https so the Secure session cookie is sent back
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def register(client):
    """
    Signs a user up and returns bearer headers for them.
    Cookies are cleared so several users can act through one client.
    """
    def _register(username: str) -> dict:
        response = client.post("/auth/signup", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 201, response.text
        response = client.post("/auth/signin", json={
            "email_or_username": username,
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _register
