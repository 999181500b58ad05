from __future__ import annotations

from typing import Callable

import httpx
import pytest

from daxtraparser.core import DaxtraErrorExtractor, DaxtraParserClient, ResilientTransport

BASE_URL = "https://cvx.example.com/"
ACCOUNT = "acme-account"
SECRET = "shared-secret"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_transport(sleeps: list[float]):
    def factory(handler: Handler, **kwargs) -> ResilientTransport:
        kwargs.setdefault("jitter", lambda: 0.5)
        return ResilientTransport(
            kwargs.pop("base_url", BASE_URL),
            kwargs.pop("default_timeout_ms", 30_000),
            kwargs.pop("error_extractor", None),
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
            sleep=sleeps.append,
            **kwargs,
        )

    return factory


@pytest.fixture
def make_client(make_transport):
    def factory(handler: Handler, *, turbo: bool = False) -> DaxtraParserClient:
        transport = make_transport(handler, error_extractor=DaxtraErrorExtractor())
        return DaxtraParserClient(BASE_URL, ACCOUNT, SECRET, turbo=turbo, transport=transport)

    return factory
