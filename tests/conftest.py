"""Shared fixtures: a client talking to an in-process fake API."""

from typing import Callable, Dict, List, Optional

import httpx
import pytest

from hcloud import Client, ClientConfig, constant_backoff

Handler = Callable[[httpx.Request], httpx.Response]

ENDPOINT = "https://api.example.com/v1"


class FakeAPI:
    """Routes requests to per-(method, path) handlers and records what was sent."""

    def __init__(self):
        self.routes: Dict[tuple, Handler] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def json(self, method: str, path: str, data, status_code: int = 200, headers: Optional[dict] = None) -> None:
        self.add(method, path, lambda request: httpx.Response(status_code, json=data, headers=headers))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/v1"):]
        handler = self.routes.get((request.method, path))
        if handler is None:
            return httpx.Response(
                404,
                json={"error": {"code": "not_found", "message": f"{path} not found"}},
            )
        return handler(request)


@pytest.fixture
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def client(api: FakeAPI):
    config = ClientConfig(
        endpoint=ENDPOINT,
        token="token",
        backoff_func=constant_backoff(0),
        http_client=httpx.Client(transport=httpx.MockTransport(api)),
    )
    with Client(config=config) as c:
        yield c
