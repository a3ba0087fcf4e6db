"""HTTP client for the Hetzner Cloud API."""

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Union

import httpx

from .action import ActionClient
from .certificate import CertificateClient
from .config import ClientConfig, Settings
from .decode import DecodeTarget, decode_into
from .exceptions import (
    CancelledError,
    ConstructionError,
    ErrorCode,
    HcloudError,
    ParseError,
    StatusError,
    TransportError,
    error_from_response,
    is_error,
)
from .floating_ip import FloatingIPClient
from .placement_group import PlacementGroupClient
from .response import Response, parse_meta
from .server import ServerClient
from .ssh_key import SSHKeyClient

logger = logging.getLogger(__name__)

Body = Union[Dict[str, Any], list, bytes, None]
PageFetcher = Callable[[int], Response]
# Seconds, or an httpx.Timeout; None keeps the client's timeouts.
RequestTimeout = Union[float, httpx.Timeout, None]


class Client:
    """Client for the Hetzner Cloud API.

    The client only holds read-only configuration and a thread-safe httpx
    client, so one instance can serve concurrent calls.
    """

    def __init__(self, token: Optional[str] = None, config: Optional[ClientConfig] = None):
        """Initialize the client.

        Args:
            token: API token. Overrides the token of ``config``.
            config: Client configuration. If None, uses default config.
        """
        self.config = config or ClientConfig()
        if token is not None:
            self.config = self.config.with_token(token)

        self._owns_http_client = self.config.http_client is None
        self._http_client = self.config.http_client or httpx.Client(timeout=self.config.timeout)

        self.action = ActionClient(self)
        self.certificate = CertificateClient(self)
        self.floating_ip = FloatingIPClient(self)
        self.placement_group = PlacementGroupClient(self)
        self.server = ServerClient(self)
        self.ssh_key = SSHKeyClient(self)

    @classmethod
    def from_env(cls, settings: Optional[Settings] = None) -> "Client":
        """Create a client from HCLOUD_* environment variables."""
        settings = settings or Settings()
        if settings.debug:
            from .logging_config import setup_logging

            setup_logging("DEBUG")
        return cls(config=settings.to_client_config())

    def new_request(
        self,
        method: str,
        path: str,
        body: Body = None,
        params: Any = None,
        timeout: RequestTimeout = None,
    ) -> httpx.Request:
        """Create an HTTP request against the API with auth and user agent set.

        Args:
            method: HTTP method
            path: Path relative to the endpoint, starting with "/"
            body: JSON-serialisable body, or bytes sent as they are
            params: Query parameters
            timeout: Deadline for this request only, stored in
                ``request.extensions["timeout"]``

        Raises:
            ConstructionError: The URL or the body is malformed
        """
        headers = {
            "User-Agent": self.config.user_agent,
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/json",
        }

        content = None
        if body is not None:
            if isinstance(body, bytes):
                content = body
            else:
                try:
                    content = json.dumps(body).encode("utf-8")
                except (TypeError, ValueError) as e:
                    raise ConstructionError(f"hcloud: cannot encode request body: {e}") from e
            headers["Content-Type"] = "application/json"

        extra: Dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = timeout

        try:
            return self._http_client.build_request(
                method,
                self.config.endpoint + path,
                content=content,
                params=params,
                headers=headers,
                **extra,
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise ConstructionError(f"hcloud: cannot build request for {path}: {e}") from e

    def do(
        self,
        request: httpx.Request,
        target: Optional[DecodeTarget] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Response:
        """Perform a request and decode a successful body into ``target``.

        The body is buffered before anything inspects it, so
        ``Response.read_body()`` keeps working after decoding.

        ``cancel`` is checked before sending and again once the response
        headers arrived; a set event drops the connection without reading
        the body. A request already on the wire is bounded by its timeout.

        Raises:
            CancelledError: ``cancel`` was set
            TransportError: The request failed on the network level
            ParseError: A JSON response body is malformed
            Error: The API returned a structured error
            StatusError: The API returned 4xx/5xx without a structured error
        """
        _check_cancelled(cancel)
        try:
            http_response = self._http_client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise TransportError(f"hcloud: {request.method} {request.url} failed: {e}") from e
        try:
            _check_cancelled(cancel)
            body = http_response.read()
        except httpx.HTTPError as e:
            raise TransportError(f"hcloud: {request.method} {request.url} failed: {e}") from e
        finally:
            http_response.close()

        response = Response(http_response)
        try:
            response.meta = parse_meta(http_response.headers, body)
        except ParseError as e:
            e.response = response
            raise

        logger.debug(
            "%s %s -> %d (ratelimit remaining %d)",
            request.method,
            request.url.path,
            http_response.status_code,
            response.meta.ratelimit.remaining,
        )

        if 400 <= http_response.status_code <= 599:
            error: HcloudError = error_from_response(
                http_response.headers.get("Content-Type"), body
            ) or StatusError(http_response.status_code)
            error.response = response
            raise error

        try:
            decode_into(target, body)
        except ValueError as e:
            raise ParseError(f"hcloud: cannot decode response body: {e}", response=response) from e

        return response

    def request(
        self,
        method: str,
        path: str,
        body: Body = None,
        params: Any = None,
        target: Optional[DecodeTarget] = None,
        cancel: Optional[threading.Event] = None,
        timeout: RequestTimeout = None,
    ) -> Response:
        """Build and perform a request in one step."""
        request = self.new_request(method, path, body=body, params=params, timeout=timeout)
        return self.do(request, target, cancel=cancel)

    def all(self, fetch_page: PageFetcher, cancel: Optional[threading.Event] = None) -> Response:
        """Call ``fetch_page`` for page 1, 2, ... until the last page.

        A ``limit_reached`` error retries the same page after waiting for the
        configured backoff. Any other error is raised immediately.

        Args:
            fetch_page: Fetches one page and returns its Response
            cancel: Set to abort between pages and during backoff waits

        Returns:
            Response: The response of the last page
        """
        retries = 0
        page = 1
        while True:
            _check_cancelled(cancel)
            try:
                response = fetch_page(page)
            except HcloudError as e:
                if not is_error(e, ErrorCode.LIMIT_REACHED):
                    raise
                if self.config.max_retries is not None and retries >= self.config.max_retries:
                    logger.warning("Rate limit still reached after %d retries, giving up", retries)
                    raise
                self._backoff(retries, cancel)
                retries += 1
                continue

            retries = 0
            pagination = response.meta.pagination
            if pagination is None or pagination.next_page == 0:
                return response
            page = pagination.next_page

    def _backoff(self, retries: int, cancel: Optional[threading.Event]) -> None:
        delay = self.config.backoff_func(retries)
        logger.warning("Rate limit reached, retrying in %.2f seconds (retry %d)", delay, retries + 1)
        if cancel is None:
            time.sleep(delay)
        elif cancel.wait(delay):
            raise CancelledError()

    def close(self):
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            self._http_client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        return f"Client(endpoint={self.config.endpoint!r})"


def _check_cancelled(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise CancelledError()
