"""Shared fixtures: settings with a fake key and a stub Pexels upstream."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from search_proxy.config import ProxySettings
from search_proxy.proxy import create_app

UPSTREAM_URL = "https://upstream.test/videos/search"
SECRET = "test-secret-key-4f9a"


@pytest.fixture
def settings() -> ProxySettings:
    return ProxySettings(pexels_api_key=SECRET, upstream_url=UPSTREAM_URL)


@pytest.fixture
def upstream_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(settings, upstream_requests) -> Callable[..., TestClient]:
    """Return a factory building a proxy client backed by ``handler``."""

    def factory(handler=None) -> TestClient:
        def record(request: httpx.Request) -> httpx.Response:
            upstream_requests.append(request)
            if handler is None:
                return httpx.Response(200, content=b'{"videos":[]}')
            return handler(request)

        upstream = httpx.AsyncClient(transport=httpx.MockTransport(record))
        return TestClient(create_app(settings=settings, client=upstream))

    return factory
