"""Tests for response meta data parsing."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from hcloud import Pagination, ParseError, Ratelimit, Response, ResponseMeta, parse_meta

JSON = {"Content-Type": "application/json"}


def test_parse_ratelimit_headers():
    headers = {
        "RateLimit-Limit": "1000",
        "RateLimit-Remaining": "999",
        "RateLimit-Reset": "1511954577",
    }

    meta = parse_meta(headers, b"")

    assert meta.ratelimit.limit == 1000
    assert meta.ratelimit.remaining == 999
    assert meta.ratelimit.reset == datetime.fromtimestamp(1511954577, tz=timezone.utc)
    assert meta.pagination is None


def test_parse_ratelimit_headers_invalid_values_are_ignored():
    headers = {
        "RateLimit-Limit": "lots",
        "RateLimit-Remaining": "",
        "RateLimit-Reset": "soon",
    }

    meta = parse_meta(headers, b"")

    assert meta.ratelimit == Ratelimit()


def test_parse_pagination():
    body = json.dumps({
        "servers": [],
        "meta": {
            "pagination": {
                "page": 2,
                "per_page": 25,
                "previous_page": 1,
                "next_page": 3,
                "last_page": 4,
                "total_entries": 100,
            }
        },
    }).encode()

    meta = parse_meta(JSON, body)

    assert meta.pagination == Pagination(
        page=2, per_page=25, previous_page=1, next_page=3, last_page=4, total_entries=100
    )


def test_parse_pagination_null_values_are_zero():
    body = b'{"meta": {"pagination": {"page": 1, "previous_page": null, "next_page": null}}}'

    meta = parse_meta(JSON, body)

    assert meta.pagination.page == 1
    assert meta.pagination.next_page == 0
    assert meta.pagination.previous_page == 0


def test_json_body_without_pagination_gives_zero_pagination():
    meta = parse_meta({"Content-Type": "application/json; charset=utf-8"}, b'{"server": {"id": 1}}')

    assert meta.pagination == Pagination()
    assert meta.pagination.next_page == 0


def test_non_json_body_is_not_parsed():
    meta = parse_meta({"Content-Type": "text/plain"}, b"{not json")

    assert meta.pagination is None


def test_malformed_json_raises_parse_error():
    with pytest.raises(ParseError):
        parse_meta(JSON, b'{"meta": ')


def test_parse_is_idempotent():
    headers = {"RateLimit-Remaining": "10", **JSON}
    body = b'{"meta": {"pagination": {"page": 1, "next_page": 2}}}'

    assert parse_meta(headers, body) == parse_meta(headers, body)


def test_response_body_can_be_read_twice():
    response = Response(httpx.Response(200, content=b"payload"), ResponseMeta())

    assert response.read_body() == b"payload"
    assert response.read_body() == b"payload"
    assert response.status_code == 200
