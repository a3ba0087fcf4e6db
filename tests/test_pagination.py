"""Tests for the pagination driver and its rate limit retries."""

import threading
from unittest.mock import patch

import httpx
import pytest

from hcloud import (
    CancelledError,
    Client,
    ClientConfig,
    Error,
    ErrorCode,
    Pagination,
    Response,
    ResponseMeta,
    ServerListOpts,
    StatusError,
    constant_backoff,
    iter_pages,
)


def page_response(next_page: int, pagination: bool = True) -> Response:
    meta = ResponseMeta(pagination=Pagination(next_page=next_page) if pagination else None)
    return Response(httpx.Response(200), meta)


@pytest.fixture
def driver():
    with Client(config=ClientConfig(token="token", backoff_func=constant_backoff(0.25))) as client:
        yield client


def test_single_page(driver):
    calls = []

    def fetch(page):
        calls.append(page)
        return page_response(next_page=0)

    driver.all(fetch)

    assert calls == [1]


def test_missing_pagination_stops(driver):
    calls = []

    def fetch(page):
        calls.append(page)
        return page_response(next_page=0, pagination=False)

    driver.all(fetch)

    assert calls == [1]


def test_three_pages_concatenated_in_order(driver):
    pages = {1: (["a", "b"], 2), 2: (["c"], 3), 3: (["d", "e"], 0)}
    calls = []

    def fetch(page):
        calls.append(page)
        items, next_page = pages[page]
        return items, page_response(next_page)

    items = iter_pages(driver, fetch)

    assert calls == [1, 2, 3]
    assert items == ["a", "b", "c", "d", "e"]


def test_limit_reached_retries_same_page(driver):
    calls = []

    def fetch(page):
        calls.append(page)
        if page == 2 and calls.count(2) == 1:
            raise Error(ErrorCode.LIMIT_REACHED, "limit reached")
        return page_response(next_page=2 if page == 1 else 0)

    with patch("hcloud.client.time.sleep") as sleep:
        driver.all(fetch)

    assert calls == [1, 2, 2]
    sleep.assert_called_once_with(0.25)


def test_backoff_gets_retry_count_and_resets_after_success():
    delays = []

    def backoff(retries):
        delays.append(retries)
        return 0

    failures = {1: 2, 2: 1}
    calls = []

    def fetch(page):
        calls.append(page)
        if failures.get(page):
            failures[page] -= 1
            raise Error(ErrorCode.LIMIT_REACHED, "limit reached")
        return page_response(next_page=2 if page == 1 else 0)

    with Client(config=ClientConfig(backoff_func=backoff)) as client:
        client.all(fetch)

    assert calls == [1, 1, 1, 2, 2]
    assert delays == [0, 1, 0]


def test_other_errors_abort(driver):
    calls = []

    def fetch(page):
        calls.append(page)
        if page == 2:
            raise Error(ErrorCode.SERVICE_ERROR, "boom")
        return ["item"], page_response(next_page=2)

    with pytest.raises(Error) as exc_info:
        iter_pages(driver, fetch)

    assert exc_info.value.code == ErrorCode.SERVICE_ERROR
    assert calls == [1, 2]


def test_status_error_aborts(driver):
    def fetch(page):
        raise StatusError(502)

    with pytest.raises(StatusError):
        driver.all(fetch)


def test_max_retries():
    calls = []

    def fetch(page):
        calls.append(page)
        raise Error(ErrorCode.LIMIT_REACHED, "limit reached")

    config = ClientConfig(backoff_func=constant_backoff(0), max_retries=3)
    with Client(config=config) as client:
        with pytest.raises(Error) as exc_info:
            client.all(fetch)

    assert exc_info.value.code == ErrorCode.LIMIT_REACHED
    assert len(calls) == 4


def test_cancel_during_backoff(driver):
    cancel = threading.Event()

    def fetch(page):
        cancel.set()
        raise Error(ErrorCode.LIMIT_REACHED, "limit reached")

    with pytest.raises(CancelledError):
        driver.all(fetch, cancel=cancel)


def test_cancel_before_fetch(driver):
    cancel = threading.Event()
    cancel.set()
    calls = []

    with pytest.raises(CancelledError):
        driver.all(lambda page: calls.append(page), cancel=cancel)

    assert calls == []


def test_resource_all_over_http(client, api):
    def servers_page(request):
        page = int(request.url.params["page"])
        next_page = page + 1 if page < 3 else None
        return httpx.Response(200, json={
            "servers": [{"id": page, "name": f"server-{page}", "status": "running"}],
            "meta": {"pagination": {"page": page, "per_page": 1, "next_page": next_page, "last_page": 3}},
        })

    api.add("GET", "/servers", servers_page)

    servers = client.server.all()

    assert [server.id for server in servers] == [1, 2, 3]
    assert [request.url.params["per_page"] for request in api.requests] == ["50", "50", "50"]


def test_resource_all_retries_rate_limit_over_http(client, api):
    responses = iter([
        httpx.Response(429, json={"error": {"code": "limit_reached", "message": "limit reached"}}),
        httpx.Response(200, json={"ssh_keys": [], "meta": {"pagination": {"page": 1, "next_page": None}}}),
    ])
    api.add("GET", "/ssh_keys", lambda request: next(responses))

    assert client.ssh_key.all() == []
    assert [request.url.params["page"] for request in api.requests] == ["1", "1"]


def test_all_with_opts_leaves_caller_opts_untouched(client, api):
    def servers_page(request):
        page = int(request.url.params["page"])
        return httpx.Response(200, json={
            "servers": [{"id": page, "name": f"server-{page}", "status": "running"}],
            "meta": {"pagination": {"page": page, "next_page": page + 1 if page < 3 else None}},
        })

    api.add("GET", "/servers", servers_page)
    opts = ServerListOpts(per_page=1, name="web")

    servers = client.server.all_with_opts(opts)

    assert [server.id for server in servers] == [1, 2, 3]
    assert opts.page == 0
    assert [request.url.params["name"] for request in api.requests] == ["web", "web", "web"]


def test_all_with_opts_passes_cancel_to_each_page(client, api):
    cancel = threading.Event()

    def first_page_then_cancel(request):
        cancel.set()
        return httpx.Response(200, json={
            "ssh_keys": [],
            "meta": {"pagination": {"page": 1, "next_page": 2}},
        })

    api.add("GET", "/ssh_keys", first_page_then_cancel)

    with pytest.raises(CancelledError):
        client.ssh_key.all(cancel=cancel)

    assert len(api.requests) == 1
