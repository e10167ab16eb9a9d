"""
Pytest fixtures shared across the unit, integration and CLI suites.

Integration tests drive the FastAPI app in-process through TestClient with
the snapshot store and import service swapped for per-test instances.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_import_service, get_store
from app.core.snapshot_store import SnapshotStore
from app.main import app
from app.schemas.tag import Snapshot
from app.services.stackexchange_client import StackExchangeClient
from app.services.tag_import_service import TagImportService
from tests.lib import TEST_BASE_URL, make_snapshot, tags_payload


@pytest.fixture
def store() -> SnapshotStore:
    """Fresh, empty snapshot store."""
    return SnapshotStore()


@pytest.fixture
def sample_snapshot() -> Snapshot:
    return make_snapshot([("C#", 2), ("Java", 2), ("Sqlite", 200)])


@pytest.fixture
def mock_transport_factory() -> Callable[[Dict[int, httpx.Response]], Tuple[httpx.MockTransport, List[httpx.Request]]]:
    """
    Factory for an httpx.MockTransport answering by ``page`` query parameter.

    Pages missing from the mapping answer with an empty item list.
    """

    def _create(responses: Dict[int, httpx.Response]):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            page = int(request.url.params["page"])
            if page in responses:
                return responses[page]
            return httpx.Response(200, json=tags_payload([], has_more=False))

        return httpx.MockTransport(handler), seen

    return _create


@pytest.fixture
def stackexchange_client_factory(mock_transport_factory):
    """Build a StackExchangeClient whose HTTP calls go to a mock transport."""

    def _create(responses: Dict[int, httpx.Response]):
        transport, seen = mock_transport_factory(responses)
        http_client = httpx.AsyncClient(transport=transport)
        client = StackExchangeClient(
            http_client=http_client,
            base_url=TEST_BASE_URL,
            site="stackoverflow",
            key="",
            timeout=5.0,
        )
        return client, seen

    return _create


@pytest.fixture
def api_client(store: SnapshotStore):
    """
    TestClient with the store overridden per test.

    Lifespan is not entered, so no startup import runs.
    """
    app.dependency_overrides[get_store] = lambda: store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def import_service_override(store: SnapshotStore, stackexchange_client_factory):
    """
    Install a TagImportService backed by mock pages for the API under test.

    Returns a function taking the page mapping and returning the service.
    """

    def _install(responses: Dict[int, httpx.Response], page_count: int = 3) -> TagImportService:
        client, _ = stackexchange_client_factory(responses)
        service = TagImportService(
            client=client,
            store=store,
            page_size=2,
            page_count=page_count,
            strategy="parallel",
            max_concurrency=3,
        )
        app.dependency_overrides[get_import_service] = lambda: service
        return service

    return _install
