"""API responses and the meta data parsed from their headers and envelope."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import httpx

from .exceptions import ParseError, is_json_content_type


@dataclass
class Pagination:
    """Pagination block of a list response. ``next_page == 0`` means last page."""

    page: int = 0
    per_page: int = 0
    previous_page: int = 0
    next_page: int = 0
    last_page: int = 0
    total_entries: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pagination":
        return cls(
            page=data.get("page") or 0,
            per_page=data.get("per_page") or 0,
            previous_page=data.get("previous_page") or 0,
            next_page=data.get("next_page") or 0,
            last_page=data.get("last_page") or 0,
            total_entries=data.get("total_entries") or 0,
        )


@dataclass
class Ratelimit:
    """Rate limit snapshot taken from the RateLimit-* headers."""

    limit: int = 0
    remaining: int = 0
    reset: Optional[datetime] = None


@dataclass
class ResponseMeta:
    """Meta information included in an API response."""

    pagination: Optional[Pagination] = None
    ratelimit: Ratelimit = field(default_factory=Ratelimit)


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = headers.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_meta(headers: Mapping[str, str], body: bytes) -> ResponseMeta:
    """
    Parse rate limit headers and the JSON pagination block of a response.

    Unparsable rate limit headers are ignored. Pagination is only read from
    JSON responses; a JSON body without ``meta.pagination`` yields an all-zero
    Pagination.

    Args:
        headers: Response headers (case-insensitive mapping)
        body: Buffered response body

    Returns:
        ResponseMeta: Parsed meta data

    Raises:
        ParseError: The body of a JSON response is not valid JSON
    """
    meta = ResponseMeta()

    limit = _int_header(headers, "RateLimit-Limit")
    if limit is not None:
        meta.ratelimit.limit = limit
    remaining = _int_header(headers, "RateLimit-Remaining")
    if remaining is not None:
        meta.ratelimit.remaining = remaining
    reset = _int_header(headers, "RateLimit-Reset")
    if reset is not None:
        try:
            meta.ratelimit.reset = datetime.fromtimestamp(reset, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass

    if is_json_content_type(headers.get("Content-Type")):
        try:
            data = json.loads(body) if body else {}
        except ValueError as e:
            raise ParseError(f"hcloud: error reading response meta data: {e}") from e

        pagination: Mapping[str, Any] = {}
        if isinstance(data, dict):
            envelope = data.get("meta")
            if isinstance(envelope, dict) and isinstance(envelope.get("pagination"), dict):
                pagination = envelope["pagination"]
        meta.pagination = Pagination.from_dict(pagination)

    return meta


class Response:
    """A response from the API: the raw httpx response plus parsed meta data."""

    def __init__(self, http_response: httpx.Response, meta: Optional[ResponseMeta] = None):
        self.http_response = http_response
        self.meta = meta or ResponseMeta()

    @property
    def status_code(self) -> int:
        return self.http_response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.http_response.headers

    def read_body(self) -> bytes:
        """Return the buffered body. Can be called any number of times."""
        return self.http_response.content

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"
