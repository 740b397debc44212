"""Shared fixtures: an httpx client backed by an in-memory site."""

import httpx
import pytest


class FakeSite:
    """Serve fixed responses by URL and remember what was requested."""

    def __init__(self):
        self.pages: dict[str, tuple[int, bytes]] = {}
        self.requested: list[str] = []

    def add(self, url: str, body: bytes | str, status: int = 200) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.pages[url] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        status, body = self.pages.get(url, (404, b"not found"))
        return httpx.Response(status, content=body)


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def client(site: FakeSite) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(site.handler))
