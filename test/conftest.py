from __future__ import annotations

import typing

import httpx
import pytest
import pytest_asyncio

import eaglenet
from eaglenet import HTTPXTransport, NetworkService


@pytest_asyncio.fixture
async def service() -> typing.AsyncGenerator[NetworkService, None]:
    async with NetworkService() as service:
        yield service


@pytest.fixture
def recorded_uploads() -> list[httpx.Request]:
    return []


@pytest_asyncio.fixture
async def mock_service(
    recorded_uploads: list[httpx.Request],
) -> typing.AsyncGenerator[NetworkService, None]:
    """
    A service whose transport fully consumes every request body, in small
    chunks, before answering ``{"ok": true}``.
    """

    async def handler(request: httpx.Request) -> httpx.Response:
        await request.aread()
        recorded_uploads.append(request)
        return httpx.Response(200, json={"ok": True})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    async with client:
        async with NetworkService(HTTPXTransport(client, blocksize=7)) as service:
            yield service


@pytest.fixture
def default_service(
    service: NetworkService,
) -> typing.Generator[NetworkService, None, None]:
    """Install ``service`` as the module-global default for one test."""
    original = eaglenet._DEFAULT_SERVICE
    eaglenet._DEFAULT_SERVICE = service
    try:
        yield service
    finally:
        eaglenet._DEFAULT_SERVICE = original
