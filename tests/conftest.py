from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sharezin.api.app import create_app
from sharezin.db.base import Base, import_orm_models
from sharezin.db.session import get_db_session
from sharezin.notifications.dispatcher import NotificationDispatcher


@pytest.fixture
def sqlite_session_factory() -> Generator[sessionmaker[Session], None, None]:
    import_orm_models()
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    try:
        yield factory
    finally:
        Base.metadata.drop_all(engine)


@pytest.fixture
def dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher()


@pytest.fixture
def client(
    sqlite_session_factory: sessionmaker[Session],
    dispatcher: NotificationDispatcher,
) -> Generator[TestClient, None, None]:
    app = create_app(dispatcher=dispatcher)

    def override_get_db_session() -> Generator[Session, None, None]:
        with sqlite_session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    with TestClient(app) as test_client:
        yield test_client


def as_user(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


@pytest.fixture
def create_receipt(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Create a receipt through the API and return its JSON payload."""

    def _create(
        creator: str = "ana",
        creator_name: str = "Ana",
        **fields: Any,
    ) -> dict[str, Any]:
        payload = {"title": "Dinner", "creator_name": creator_name, **fields}
        response = client.post("/v1/receipts", json=payload, headers=as_user(creator))
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def join_receipt(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Request to join as ``user_id`` and have the creator approve it."""

    def _join(
        receipt: dict[str, Any],
        user_id: str,
        name: str,
    ) -> dict[str, Any]:
        requested = client.post(
            f"/v1/receipts/{receipt['id']}/join-requests",
            json={"name": name},
            headers=as_user(user_id),
        )
        assert requested.status_code == 201, requested.text
        pending_id = requested.json()["pending_participant"]["id"]
        approved = client.post(
            f"/v1/receipts/{receipt['id']}/join-requests/{pending_id}/approve",
            headers=as_user(receipt["creator_id"]),
        )
        assert approved.status_code == 200, approved.text
        return approved.json()

    return _join
