"""Shared fixtures for unit tests."""

from collections.abc import AsyncIterator

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


async def _echo_raw_path(request: web.Request) -> web.Response:
    return web.Response(text=request.raw_path, headers={"X-Method": request.method})


@pytest.fixture
async def echo_server() -> AsyncIterator[str]:
    """Run a local server answering 200 with the raw request target.

    Yields the server base URL.
    """
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", _echo_raw_path)
    async with TestServer(app, host="127.0.0.1") as server:
        yield f"http://127.0.0.1:{server.port}"
