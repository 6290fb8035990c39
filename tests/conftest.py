"""Shared test fixtures."""

import os
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

# Keep tests on the in-memory store regardless of the local .env
os.environ["CASE_STORAGE_TYPE"] = "inmemory"

from alert_service.api.dependencies import get_case_repository
from alert_service.core.case_manager import CaseManager
from alert_service.infrastructure.persistence import InMemoryCaseRepository
from alert_service.main import app
from alert_service.models import CaseCreateRequest, Requester, UserRole

OWNER_ID = "user_owner"
OTHER_ID = "user_other"
ADMIN_ID = "user_admin"


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def case_payload(**overrides) -> dict:
    """Valid create-case body; nested keys can be overridden wholesale."""
    payload = {
        "title": "Missing teenager",
        "description": "Left home after school and did not return",
        "missing_person": {"name": "Jane Doe", "age": 14, "gender": "female"},
        "last_known_location": {
            "address": "12 Elm St",
            "city": "Springfield",
            "state": "IL",
        },
        "last_seen_date": "2025-07-14",
        "contact_info": {"primary_contact": {"name": "John Doe", "phone": "555-0100"}},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 7, 15, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def repository() -> InMemoryCaseRepository:
    return InMemoryCaseRepository()


@pytest.fixture
def manager(repository, clock) -> CaseManager:
    return CaseManager(repository, clock=clock, case_number_prefix="MA")


@pytest.fixture
def owner() -> Requester:
    return Requester(id=OWNER_ID, name="Olivia Owner")


@pytest.fixture
def other_user() -> Requester:
    return Requester(id=OTHER_ID, name="Oscar Other")


@pytest.fixture
def admin() -> Requester:
    return Requester(id=ADMIN_ID, name="Ada Admin", role=UserRole.ADMIN)


@pytest.fixture
def create_request() -> CaseCreateRequest:
    return CaseCreateRequest(**case_payload())


@pytest.fixture
async def client(repository) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with a fresh in-memory repository."""

    async def override_get_case_repository():
        yield repository

    app.dependency_overrides[get_case_repository] = override_get_case_repository

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(user_id: str = OWNER_ID, name: str = "Olivia Owner", role: str = "user") -> dict:
    return {"X-User-ID": user_id, "X-User-Name": name, "X-User-Role": role}
