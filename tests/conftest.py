"""
Shared fixtures: settings, in-memory record store, recording SMS sender,
and a TestClient wired to them through dependency overrides.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Set

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.lifeline.alerts.alert_service import SosAlertService
from backend.lifeline.api.dependencies import (
    get_alert_service,
    get_app_settings,
    get_chat_client,
    get_places_client,
    get_store,
)
from backend.lifeline.core.config import Settings
from backend.lifeline.core.errors import DeliveryError, StorageError
from backend.lifeline.main import app
from backend.lifeline.records.schemas import (
    EmergencyProfile,
    FirstAidEntry,
    UpsertResult,
)
from backend.lifeline.services.chat import ChatClient
from backend.lifeline.services.places import PlacesClient


class InMemoryStore:
    """RecordStore stand-in keyed by user id."""

    def __init__(self):
        self.first_aid: List[FirstAidEntry] = []
        self.profiles: Dict[str, EmergencyProfile] = {}
        self.down = False

    def _check(self, operation: str) -> None:
        if self.down:
            raise StorageError(operation)

    async def ping(self) -> None:
        if self.down:
            raise StorageError("ping", "database unreachable")

    async def list_first_aid(self) -> List[FirstAidEntry]:
        self._check("list_first_aid")
        return list(self.first_aid)

    async def get_profile(self, user_id: str) -> Optional[EmergencyProfile]:
        self._check("get_profile")
        profile = self.profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def upsert_profile(self, profile: EmergencyProfile) -> UpsertResult:
        self._check("upsert_profile")
        created = profile.user_id not in self.profiles
        self.profiles[profile.user_id] = profile.model_copy(deep=True)
        return UpsertResult(user_id=profile.user_id, created=created)


class RecordingSender:
    """SMS sender double: optional per-number delay and failure."""

    def __init__(
        self,
        failing: Optional[Set[str]] = None,
        delays: Optional[Dict[str, float]] = None,
    ):
        self.failing = failing or set()
        self.delays = delays or {}
        self.sent: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, body: str, to: Optional[str]) -> str:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(to, 0))
            if to in self.failing:
                raise DeliveryError(to, "invalid 'To' phone number")
            self.sent.append((to, body))
            return f"SM{len(self.sent):04d}"
        finally:
            self.in_flight -= 1


class ProviderStub:
    """httpx handler that records requests and replays one canned response."""

    def __init__(self, status_code: int = 200, json_body=None, exc: Optional[Exception] = None):
        self.status_code = status_code
        self.json_body = json_body if json_body is not None else {}
        self.exc = exc
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def make_settings(**overrides) -> Settings:
    values = dict(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite+aiosqlite://",
        GOOGLE_MAPS_API_KEY="maps-test-key",
        GEMINI_API_KEY="gemini-test-key",
        SMS_PROVIDER="simulation",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def places_stub() -> ProviderStub:
    return ProviderStub(json_body={"status": "OK", "results": [{"name": "City Hospital"}]})


@pytest.fixture
def chat_stub() -> ProviderStub:
    return ProviderStub(json_body={
        "candidates": [{"content": {"parts": [{"text": "Cool the burn under running water."}]}}],
    })


@pytest.fixture
def client(store, sender, places_stub, chat_stub, test_settings):
    app.dependency_overrides[get_app_settings] = lambda: test_settings
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_alert_service] = lambda: SosAlertService(store, sender)
    app.dependency_overrides[get_places_client] = lambda: PlacesClient(
        test_settings, transport=places_stub.transport,
    )
    app.dependency_overrides[get_chat_client] = lambda: ChatClient(
        test_settings, transport=chat_stub.transport,
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
