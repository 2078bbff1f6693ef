import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from edusearch.main import app
from edusearch.services.search_client import RemoteSearchClient
from edusearch.services.session_service import session_registry

WEBHOOK_URL = "https://search.test/webhook/course-content"


class FakeWebhook:
    """Stands in for the remote search endpoint behind an httpx.MockTransport."""

    def __init__(self):
        self.requests: list[dict] = []
        self.status_code = 200
        self.body = {"matches": []}
        self.bodies_by_text: dict[str, object] = {}
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        body = self.bodies_by_text.get(payload.get("textoBusqueda"), self.body)
        if isinstance(body, (str, bytes)):
            return httpx.Response(self.status_code, content=body)
        return httpx.Response(self.status_code, json=body)


@pytest.fixture
def webhook():
    return FakeWebhook()


@pytest.fixture
def search_client(webhook):
    return RemoteSearchClient(
        WEBHOOK_URL,
        timeout=2.0,
        transport=httpx.MockTransport(webhook.handle),
    )


@pytest.fixture
def fresh_registry(search_client):
    """Point the shared registry at the fake webhook for each test."""
    original_client = session_registry._client
    session_registry.clear()
    session_registry.client = search_client
    yield session_registry
    session_registry.clear()
    session_registry.client = original_client


@pytest.fixture
def client(fresh_registry):
    return TestClient(app)
