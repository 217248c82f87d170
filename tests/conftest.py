"""
Shared fixtures: test settings, a route-table mock of the parliament API
and a file-backed SQLite store per test.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import pytest_asyncio

from sejm_sync.adapters.transport import SejmTransport
from sejm_sync.config import Settings
from sejm_sync.db.session import Database

BASE_URL = "https://api.test"

Handler = Union[Any, Callable[[httpx.Request], httpx.Response]]


class MockApi:
    """
    Route table for httpx.MockTransport.

    Routes map a path to a JSON-serializable body, an httpx.Response, or a
    callable taking the request. Paths without a route go to ``fallback``
    when set, else answer 404. Every request path is recorded in ``calls``.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Handler] = {}
        self.calls: List[str] = []
        self.fallback: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def add(self, path: str, handler: Handler) -> None:
        self.routes[path] = handler

    def html(self, path: str, body: str) -> None:
        self.routes[path] = httpx.Response(200, text=body, headers={"content-type": "text/html"})

    def count(self, path: str) -> int:
        return self.calls.count(path)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        handler = self.routes.get(path)
        if handler is None and self.fallback:
            return self.fallback(request)
        if handler is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(handler) and not isinstance(handler, httpx.Response):
            return handler(request)
        if isinstance(handler, httpx.Response):
            return httpx.Response(
                handler.status_code, content=handler.content, headers=handler.headers
            )
        return httpx.Response(200, content=json.dumps(handler), headers={"content-type": "application/json"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self), base_url=BASE_URL)


def transcript_page(*fragments: Tuple[str, str]) -> str:
    """Build a transcript page with one speaker heading per fragment."""
    body = "".join(
        f'<h2 class="mowca">{speaker}:</h2><p>{text}</p>' for speaker, text in fragments
    )
    return f"<html><body>{body}</body></html>"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings.for_tests(db_path=str(tmp_path / "sejm.db"))


@pytest.fixture
def api() -> MockApi:
    return MockApi()


@pytest_asyncio.fixture
async def transport(api, test_settings):
    client = api.client()
    transport = SejmTransport(test_settings.api, client=client)
    yield transport
    await client.aclose()


@pytest_asyncio.fixture
async def database(test_settings):
    database = Database(test_settings.db)
    await database.initialize()
    await database.create_tables()
    yield database
    await database.close()

