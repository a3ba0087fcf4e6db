"""Tests for request building and the transport."""

import io
import threading
import json

import httpx
import pytest

from hcloud import (
    CancelledError,
    Client,
    ClientConfig,
    ConstructionError,
    Error,
    ErrorCode,
    JSONTarget,
    ParseError,
    StatusError,
    TransportError,
)


class TestNewRequest:

    def test_headers(self, client):
        request = client.new_request("GET", "/servers")

        assert str(request.url) == "https://api.example.com/v1/servers"
        assert request.headers["Authorization"] == "Bearer token"
        assert request.headers["User-Agent"] == "hcloud-python/1.0.0"
        assert "Content-Type" not in request.headers

    def test_json_body(self, client):
        request = client.new_request("POST", "/ssh_keys", body={"name": "key"})

        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"name": "key"}

    def test_query_params(self, client):
        request = client.new_request("GET", "/servers", params=[("page", "2"), ("sort", "id"), ("sort", "name")])

        assert request.url.params.get_list("sort") == ["id", "name"]
        assert request.url.params["page"] == "2"

    def test_unserialisable_body(self, client):
        with pytest.raises(ConstructionError):
            client.new_request("POST", "/servers", body={"name": object()})

    def test_application_user_agent(self):
        config = ClientConfig(token="t").with_application("my-tool", "2.1")
        with Client(config=config) as client:
            request = client.new_request("GET", "/servers")

        assert request.headers["User-Agent"] == "my-tool/2.1 hcloud-python/1.0.0"


class TestDo:

    def test_decode_json(self, client, api):
        api.json("GET", "/servers/1", {"server": {"id": 1}}, headers={"RateLimit-Remaining": "42"})
        target = JSONTarget()

        response = client.request("GET", "/servers/1", target=target)

        assert target.value == {"server": {"id": 1}}
        assert response.meta.ratelimit.remaining == 42
        assert response.meta.pagination.next_page == 0

    def test_body_readable_after_decode(self, client, api):
        api.json("GET", "/servers/1", {"server": {"id": 1}})

        response = client.request("GET", "/servers/1", target=JSONTarget())

        assert json.loads(response.read_body()) == {"server": {"id": 1}}
        assert response.read_body() == response.read_body()

    def test_raw_sink(self, client, api):
        api.add("GET", "/raw", lambda request: httpx.Response(200, content=b"\x00\x01binary"))
        sink = io.BytesIO()

        client.request("GET", "/raw", target=sink)

        assert sink.getvalue() == b"\x00\x01binary"

    def test_structured_error(self, client, api):
        api.json("GET", "/servers/1", {"error": {"code": "not_found", "message": "x"}}, status_code=404)

        with pytest.raises(Error) as exc_info:
            client.request("GET", "/servers/1", target=JSONTarget())

        assert exc_info.value.code == ErrorCode.NOT_FOUND
        assert exc_info.value.message == "x"
        assert exc_info.value.response.status_code == 404

    def test_unstructured_error(self, client, api):
        api.add("GET", "/servers/1", lambda request: httpx.Response(404, text="not found"))
        target = JSONTarget()

        with pytest.raises(StatusError) as exc_info:
            client.request("GET", "/servers/1", target=target)

        assert exc_info.value.status_code == 404
        assert target.value is None

    def test_server_error_without_body(self, client, api):
        api.add("GET", "/servers", lambda request: httpx.Response(503, json={"error": {}}))

        with pytest.raises(StatusError) as exc_info:
            client.request("GET", "/servers")

        assert exc_info.value.status_code == 503

    def test_malformed_json(self, client, api):
        api.add(
            "GET",
            "/servers",
            lambda request: httpx.Response(200, content=b"{", headers={"Content-Type": "application/json"}),
        )

        with pytest.raises(ParseError):
            client.request("GET", "/servers")

    def test_transport_error(self, client, api):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        api.add("GET", "/servers", fail)

        with pytest.raises(TransportError) as exc_info:
            client.request("GET", "/servers")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_sends_authorization(self, client, api):
        api.json("DELETE", "/ssh_keys/1", {})

        client.request("DELETE", "/ssh_keys/1")

        assert api.requests[0].headers["Authorization"] == "Bearer token"


class TestCancelAndTimeout:

    def test_cancelled_before_send(self, client, api):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(CancelledError):
            client.request("GET", "/servers", cancel=cancel)

        assert api.requests == []

    def test_cancelled_while_request_in_flight(self, client, api):
        cancel = threading.Event()

        def respond_after_cancel(request):
            cancel.set()
            return httpx.Response(200, json={"servers": []})

        api.add("GET", "/servers", respond_after_cancel)

        with pytest.raises(CancelledError):
            client.request("GET", "/servers", target=JSONTarget(), cancel=cancel)

        assert len(api.requests) == 1

    def test_unset_event_does_not_interfere(self, client, api):
        api.json("GET", "/servers", {"servers": []})
        target = JSONTarget()

        client.request("GET", "/servers", target=target, cancel=threading.Event())

        assert target.value == {"servers": []}

    def test_per_request_timeout(self, client):
        request = client.new_request("GET", "/servers", timeout=2.5)

        assert request.extensions["timeout"] == httpx.Timeout(2.5).as_dict()

    def test_per_request_timeout_object(self, client):
        timeout = httpx.Timeout(10, connect=1)

        request = client.new_request("GET", "/servers", timeout=timeout)

        assert request.extensions["timeout"] == timeout.as_dict()

    def test_default_timeout_left_to_http_client(self, client):
        http_client = client.config.http_client

        request = client.new_request("GET", "/servers")

        assert request.extensions["timeout"] == http_client.timeout.as_dict()

    def test_timeout_reaches_transport(self, client, api):
        api.json("GET", "/servers", {"servers": []})

        client.request("GET", "/servers", timeout=3)

        assert api.requests[0].extensions["timeout"]["read"] == 3

    def test_resource_operation_cancel(self, client, api):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(CancelledError):
            client.server.get_by_id(42, cancel=cancel)

        assert api.requests == []


def test_close_keeps_foreign_http_client():
    http_client = httpx.Client()
    Client(config=ClientConfig(http_client=http_client)).close()

    assert not http_client.is_closed
    http_client.close()
