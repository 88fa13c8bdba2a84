"""Shared fixtures: an in-memory database and an API client wired to it."""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from studyarena.app import app
from studyarena.core import get_session
from studyarena.models import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine) -> Iterator[TestClient]:
    def _session_override() -> Iterator[Session]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def add_user(session):
    def _add(user_id: str, nickname: str = "", experience: float = 0.0, **fields) -> User:
        user = User(id=user_id, nickname=nickname, experience=experience, **fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _add
