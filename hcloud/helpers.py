"""Request helpers shared by the resource clients."""

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union

from .decode import JSONTarget
from .exceptions import Error, ErrorCode
from .response import Response

if TYPE_CHECKING:
    from .client import Body, Client, RequestTimeout

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

QueryParams = List[Tuple[str, str]]


@dataclass
class ListOpts:
    """Options for listing resources."""

    page: int = 0  # Page (starting at 1)
    per_page: int = 0  # Items per page (0 means default)
    label_selector: str = ""

    def values(self) -> QueryParams:
        """Query parameters for the set options."""
        params: QueryParams = []
        if self.page > 0:
            params.append(("page", str(self.page)))
        if self.per_page > 0:
            params.append(("per_page", str(self.per_page)))
        if self.label_selector:
            params.append(("label_selector", self.label_selector))
        return params


def parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def to_enum(enum_cls: Type[E], value: str, default: Optional[E] = None) -> Union[E, str]:
    """Convert an API value to ``enum_cls``.

    Values added to the API after this release fall back to ``default``, or
    stay plain strings when there is none.
    """
    try:
        return enum_cls(value)
    except ValueError:
        return value if default is None else default


def _json_request(
    client: "Client",
    method: str,
    path: str,
    body: "Body" = None,
    params: Any = None,
    cancel: Optional[threading.Event] = None,
    timeout: "RequestTimeout" = None,
) -> Tuple[Dict[str, Any], Response]:
    target = JSONTarget()
    response = client.request(
        method, path, body=body, params=params, target=target, cancel=cancel, timeout=timeout
    )
    return target.value or {}, response


def get_request(
    client: "Client",
    path: str,
    params: Any = None,
    cancel: Optional[threading.Event] = None,
    timeout: "RequestTimeout" = None,
) -> Tuple[Dict[str, Any], Response]:
    return _json_request(client, "GET", path, params=params, cancel=cancel, timeout=timeout)


def post_request(
    client: "Client",
    path: str,
    body: "Body" = None,
    cancel: Optional[threading.Event] = None,
    timeout: "RequestTimeout" = None,
) -> Tuple[Dict[str, Any], Response]:
    return _json_request(client, "POST", path, body=body, cancel=cancel, timeout=timeout)


def put_request(
    client: "Client",
    path: str,
    body: "Body" = None,
    cancel: Optional[threading.Event] = None,
    timeout: "RequestTimeout" = None,
) -> Tuple[Dict[str, Any], Response]:
    return _json_request(client, "PUT", path, body=body, cancel=cancel, timeout=timeout)


def delete_request(
    client: "Client",
    path: str,
    cancel: Optional[threading.Event] = None,
    timeout: "RequestTimeout" = None,
) -> Tuple[Dict[str, Any], Response]:
    return _json_request(client, "DELETE", path, cancel=cancel, timeout=timeout)


def delete_request_no_result(
    client: "Client",
    path: str,
    cancel: Optional[threading.Event] = None,
    timeout: "RequestTimeout" = None,
) -> Response:
    return client.request("DELETE", path, cancel=cancel, timeout=timeout)


def iter_pages(
    client: "Client",
    fetch_page: Callable[[int], Tuple[List[T], Response]],
    cancel: Optional[threading.Event] = None,
) -> List[T]:
    """Fetch every page through ``client.all`` and concatenate the items in page order."""
    items: List[T] = []

    def collect(page: int) -> Response:
        page_items, response = fetch_page(page)
        items.extend(page_items)
        return response

    client.all(collect, cancel=cancel)
    return items


def first_by_name(
    name: str,
    list_func: Callable[[], Tuple[List[T], Response]],
) -> Tuple[Optional[T], Optional[Response]]:
    """Return the first listed item, or None when the name is empty or nothing matches."""
    if not name:
        return None, None
    items, response = list_func()
    if not items:
        return None, response
    return items[0], response


def get_by_id_or_name(
    id_or_name: str,
    get_by_id: Callable[[int], Tuple[Optional[T], Response]],
    get_by_name: Callable[[str], Tuple[Optional[T], Optional[Response]]],
) -> Tuple[Optional[T], Optional[Response]]:
    """Look up by ID when ``id_or_name`` is made of digits only, by name otherwise."""
    if not (id_or_name.isascii() and id_or_name.isdigit()):
        return get_by_name(id_or_name)

    result, response = get_by_id(int(id_or_name))
    if result is None:
        # Resource names may look like integers.
        return get_by_name(id_or_name)
    return result, response


def get_resource(
    client: "Client",
    path: str,
    key: str,
    from_schema: Callable[[Dict[str, Any]], T],
    cancel: Optional[threading.Event] = None,
) -> Tuple[Optional[T], Response]:
    """GET a single resource, returning None instead of raising for not_found."""
    try:
        body, response = get_request(client, path, cancel=cancel)
    except Error as e:
        if e.code == ErrorCode.NOT_FOUND:
            return None, e.response
        raise
    return from_schema(body[key]), response


def compact(**fields: Any) -> Dict[str, Any]:
    """Drop fields that are None so they are left out of a request body."""
    return {key: value for key, value in fields.items() if value is not None}
