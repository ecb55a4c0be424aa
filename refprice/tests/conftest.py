"""Shared fixtures: stubbed HTTP transport and controllable fetchers."""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from refprice.src.fetchers import BaseFetcher, SourceDescriptor


@pytest.fixture
def mock_http(monkeypatch):
    """Route all shared-client requests to a handler.

    Usage: ``requests = mock_http(lambda request: httpx.Response(200, json=...))``.
    Returns the list of requests seen, in order.
    """

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Request]:
        seen: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(record))
        monkeypatch.setattr(BaseFetcher, "_shared_client", client)
        return seen

    return install


def json_response(payload: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    """Handler that always answers with the same JSON body."""
    return lambda request: httpx.Response(status_code, json=payload)


@pytest.fixture
def respond_json():
    return json_response


class FakeFetcher(BaseFetcher):
    """Fetcher that sleeps, then returns a fixed price or raises a fixed error."""

    name = "fake"

    def __init__(
        self,
        name: str,
        price: float | None = None,
        error: BaseException | None = None,
        delay: float = 0.0,
        timeout: float = 1.0,
    ):
        super().__init__(
            SourceDescriptor(name=name, endpoint=f"https://{name}.test/price", timeout=timeout)
        )
        self.price = price
        self.error = error
        self.delay = delay
        self.finished = False

    @classmethod
    def default_endpoint(cls, base: str, quote: str) -> str:
        return f"https://fake.test/{base}{quote}"

    def parse_price(self, payload: Any) -> float:
        return float(payload)

    async def fetch_price(self) -> float:
        await asyncio.sleep(self.delay)
        self.finished = True
        if self.error is not None:
            raise self.error
        return self.price


@pytest.fixture
def fake_fetcher():
    """Factory for FakeFetcher instances."""
    return FakeFetcher
