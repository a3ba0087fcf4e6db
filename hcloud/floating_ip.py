"""Floating IPs: addresses that can be moved between servers."""

import ipaddress
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from .action import Action
from .exceptions import DNSNotFoundError, InvalidIPError, InvalidOptionsError
from .helpers import (
    ListOpts,
    QueryParams,
    compact,
    delete_request_no_result,
    first_by_name,
    get_by_id_or_name,
    get_request,
    get_resource,
    iter_pages,
    parse_time,
    post_request,
    put_request,
    to_enum,
)
from .location import Location
from .response import Response

if TYPE_CHECKING:
    from .client import Client
    from .server import Server

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class FloatingIPType(str, Enum):
    IPV4 = "ipv4"
    IPV6 = "ipv6"


@dataclass
class FloatingIPProtection:
    delete: bool = False


@dataclass
class FloatingIP:
    """A Floating IP in the Hetzner Cloud.

    For IPv6 Floating IPs ``ip`` is the first address of ``network``.
    """

    id: int
    name: str
    type: Union[FloatingIPType, str]
    ip: IPAddress
    network: Optional[ipaddress.IPv6Network] = None
    description: str = ""
    created: Optional[datetime] = None
    server: Optional[int] = None
    dns_ptr: Dict[str, str] = field(default_factory=dict)
    home_location: Optional[Location] = None
    blocked: bool = False
    protection: FloatingIPProtection = field(default_factory=FloatingIPProtection)
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_schema(cls, data: Dict[str, Any]) -> "FloatingIP":
        ip_type = to_enum(FloatingIPType, data["type"])
        network = None
        if ip_type == FloatingIPType.IPV6:
            network = ipaddress.IPv6Network(data["ip"], strict=False)
            ip: IPAddress = network.network_address
        else:
            ip = ipaddress.ip_address(data["ip"])

        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=ip_type,
            ip=ip,
            network=network,
            description=data.get("description") or "",
            created=parse_time(data.get("created")),
            server=data.get("server"),
            dns_ptr={entry["ip"]: entry["dns_ptr"] for entry in data.get("dns_ptr") or []},
            home_location=Location.from_schema(data.get("home_location")),
            blocked=data.get("blocked", False),
            protection=FloatingIPProtection(delete=(data.get("protection") or {}).get("delete", False)),
            labels=data.get("labels") or {},
        )

    def get_dns_ptr_for_ip(self, ip: Union[str, IPAddress]) -> str:
        """Return the reverse DNS pointer set for ``ip``.

        Raises:
            DNSNotFoundError: No pointer is set for the address
        """
        key = str(ip)
        if key not in self.dns_ptr:
            raise DNSNotFoundError(key)
        return self.dns_ptr[key]


@dataclass
class FloatingIPListOpts(ListOpts):
    name: str = ""
    sort: List[str] = field(default_factory=list)

    def values(self) -> QueryParams:
        params = super().values()
        if self.name:
            params.append(("name", self.name))
        params.extend(("sort", sort) for sort in self.sort)
        return params


@dataclass
class FloatingIPCreateOpts:
    """Options for creating a Floating IP. Needs a home location or a server."""

    type: Optional[FloatingIPType] = None
    home_location: Optional[Location] = None
    server: Optional["Server"] = None
    description: Optional[str] = None
    name: Optional[str] = None
    labels: Optional[Dict[str, str]] = None

    def validate(self) -> None:
        try:
            FloatingIPType(self.type)
        except ValueError:
            raise InvalidOptionsError("missing or invalid type") from None
        if self.home_location is None and self.server is None:
            raise InvalidOptionsError("one of home location or server is required")


@dataclass
class FloatingIPCreateResult:
    floating_ip: FloatingIP
    action: Optional[Action]


@dataclass
class FloatingIPUpdateOpts:
    description: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    name: Optional[str] = None


class FloatingIPClient:
    """Client for the Floating IP API."""

    def __init__(self, client: "Client"):
        self._client = client

    def get_by_id(
        self, floating_ip_id: int, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[FloatingIP], Response]:
        """Retrieve a Floating IP by its ID. Returns None if it does not exist."""
        return get_resource(
            self._client,
            f"/floating_ips/{floating_ip_id}",
            "floating_ip",
            FloatingIP.from_schema,
            cancel=cancel,
        )

    def get_by_name(
        self, name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[FloatingIP], Optional[Response]]:
        return first_by_name(name, lambda: self.list(FloatingIPListOpts(name=name), cancel=cancel))

    def get(
        self, id_or_name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[FloatingIP], Optional[Response]]:
        return get_by_id_or_name(
            id_or_name,
            lambda floating_ip_id: self.get_by_id(floating_ip_id, cancel=cancel),
            lambda name: self.get_by_name(name, cancel=cancel),
        )

    def list(
        self, opts: Optional[FloatingIPListOpts] = None, cancel: Optional[threading.Event] = None
    ) -> Tuple[List[FloatingIP], Response]:
        """Return the Floating IPs of one page.

        Filters left at their zero value are not sent.
        """
        opts = opts or FloatingIPListOpts()
        body, response = get_request(
            self._client, "/floating_ips", params=opts.values(), cancel=cancel
        )
        return [FloatingIP.from_schema(item) for item in body.get("floating_ips") or []], response

    def all(self, cancel: Optional[threading.Event] = None) -> List[FloatingIP]:
        return self.all_with_opts(FloatingIPListOpts(per_page=50), cancel=cancel)

    def all_with_opts(
        self, opts: FloatingIPListOpts, cancel: Optional[threading.Event] = None
    ) -> List[FloatingIP]:
        def fetch_page(page: int) -> Tuple[List[FloatingIP], Response]:
            return self.list(replace(opts, page=page), cancel=cancel)

        return iter_pages(self._client, fetch_page, cancel=cancel)

    def create(
        self, opts: FloatingIPCreateOpts, cancel: Optional[threading.Event] = None
    ) -> Tuple[FloatingIPCreateResult, Response]:
        opts.validate()
        req_body = compact(
            type=FloatingIPType(opts.type).value,
            description=opts.description,
            name=opts.name,
            home_location=opts.home_location.name if opts.home_location else None,
            server=opts.server.id if opts.server else None,
            labels=opts.labels,
        )
        body, response = post_request(self._client, "/floating_ips", req_body, cancel=cancel)
        action = Action.from_schema(body["action"]) if body.get("action") else None
        result = FloatingIPCreateResult(
            floating_ip=FloatingIP.from_schema(body["floating_ip"]),
            action=action,
        )
        return result, response

    def update(
        self,
        floating_ip: FloatingIP,
        opts: FloatingIPUpdateOpts,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[FloatingIP, Response]:
        req_body = compact(description=opts.description, name=opts.name, labels=opts.labels)
        body, response = put_request(
            self._client, f"/floating_ips/{floating_ip.id}", req_body, cancel=cancel
        )
        return FloatingIP.from_schema(body["floating_ip"]), response

    def delete(self, floating_ip: FloatingIP, cancel: Optional[threading.Event] = None) -> Response:
        return delete_request_no_result(
            self._client, f"/floating_ips/{floating_ip.id}", cancel=cancel
        )

    def _action(
        self,
        floating_ip: FloatingIP,
        action: str,
        req_body: Dict[str, Any],
        cancel: Optional[threading.Event],
    ) -> Tuple[Action, Response]:
        body, response = post_request(
            self._client,
            f"/floating_ips/{floating_ip.id}/actions/{action}",
            req_body,
            cancel=cancel,
        )
        return Action.from_schema(body["action"]), response

    def assign(
        self, floating_ip: FloatingIP, server: "Server", cancel: Optional[threading.Event] = None
    ) -> Tuple[Action, Response]:
        """Assign a Floating IP to a server."""
        return self._action(floating_ip, "assign", {"server": server.id}, cancel)

    def unassign(
        self, floating_ip: FloatingIP, cancel: Optional[threading.Event] = None
    ) -> Tuple[Action, Response]:
        """Unassign a Floating IP from the server it is assigned to."""
        return self._action(floating_ip, "unassign", {}, cancel)

    def change_dns_ptr(
        self,
        floating_ip: FloatingIP,
        ip: str,
        ptr: Optional[str],
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[Action, Response]:
        """Change the reverse DNS pointer of an address. A None ptr resets it.

        Raises:
            InvalidIPError: ``ip`` is not an IP address
        """
        try:
            address = ipaddress.ip_address(ip)
        except ValueError:
            raise InvalidIPError(ip) from None
        return self._action(
            floating_ip, "change_dns_ptr", {"ip": str(address), "dns_ptr": ptr}, cancel
        )

    def change_protection(
        self,
        floating_ip: FloatingIP,
        delete: Optional[bool] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[Action, Response]:
        """Change the resource protection level of a Floating IP."""
        return self._action(floating_ip, "change_protection", compact(delete=delete), cancel)
