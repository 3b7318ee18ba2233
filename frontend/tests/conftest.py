"""
Shared fixtures for the frontend tests.

Upstream and backend HTTP traffic is served by ``FakeServer`` instances
mounted on ``httpx.MockTransport``, so no test touches the network. Lane
delays and backoff are zero unless a test asks otherwise.
"""
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, PROJECT_ROOT)

import httpx
import pytest

from fakes import BACKEND, UPSTREAM, FakeServer
from frontend.backend import BackendClient
from frontend.coordinator import FetchCoordinator
from frontend.session import ViewSessionController
from frontend.settings import CoordinatorSettings


@pytest.fixture
def settings():
    return CoordinatorSettings(
        _env_file=None,
        critical_delay_ms=0,
        background_delay_ms=0,
        base_backoff_ms=0,
        search_debounce_ms=20,
        hero_interval_ms=30,
        upstream_base_url=UPSTREAM,
        backend_base_url=BACKEND,
    )


@pytest.fixture
def jikan():
    return FakeServer("/v4")


@pytest.fixture
def backend_api():
    return FakeServer()


@pytest.fixture
async def coordinator(settings, jikan):
    client = httpx.AsyncClient(transport=httpx.MockTransport(jikan))
    async with FetchCoordinator(settings, client=client) as coordinator:
        yield coordinator
    await client.aclose()


@pytest.fixture
async def backend(settings, backend_api):
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend_api))
    async with BackendClient(settings.backend_base_url, client=client) as backend:
        yield backend
    await client.aclose()


@pytest.fixture
async def controller(coordinator, backend):
    controller = ViewSessionController(coordinator, backend)
    yield controller
    await controller.close()
