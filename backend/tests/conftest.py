"""Test fixtures: gateway TestClient, catalog-backed payloads, mocked transports."""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from raahvia.config import ClientConfig
from raahvia.main import app
from raahvia.services.catalog import load_catalog
from raahvia.services.retrieval_client import RetrievalClient

BASE_URL = "http://gateway.test/api"


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="session")
def catalog():
    return load_catalog()


@pytest.fixture
def backend_body(catalog) -> Dict[str, Any]:
    """A valid /api/qr-scan body exactly as the gateway would send it."""
    return copy.deepcopy(catalog.resolve_scan("aud_entrance").to_wire())


@pytest.fixture
def make_client() -> Callable[..., RetrievalClient]:
    """Build a RetrievalClient whose requests go to ``handler``.

    Fast defaults: 1 s deadline, one retry after 10 ms.
    """

    def _make(handler, **overrides) -> RetrievalClient:
        cfg = {"base_url": BASE_URL, "timeout_ms": 1000, "max_retries": 1, "retry_delay_ms": 10}
        cfg.update(overrides)
        return RetrievalClient(ClientConfig(**cfg), transport=httpx.MockTransport(handler))

    return _make
