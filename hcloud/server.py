"""Servers and their power and protection actions."""

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .action import Action, actions_from_schema
from .exceptions import InvalidOptionsError
from .helpers import (
    ListOpts,
    QueryParams,
    compact,
    delete_request,
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
    from .placement_group import PlacementGroup
    from .ssh_key import SSHKey


class ServerStatus(str, Enum):
    INITIALIZING = "initializing"
    OFF = "off"
    RUNNING = "running"
    STARTING = "starting"
    STOPPING = "stopping"
    MIGRATING = "migrating"
    REBUILDING = "rebuilding"
    DELETING = "deleting"
    UNKNOWN = "unknown"


@dataclass
class ServerProtection:
    delete: bool = False
    rebuild: bool = False


@dataclass
class Server:
    id: int
    name: str
    status: ServerStatus
    created: Optional[datetime] = None
    server_type: str = ""
    image: Optional[str] = None
    location: Optional[Location] = None
    public_ipv4: Optional[str] = None
    public_ipv6: Optional[str] = None
    placement_group: Optional[int] = None
    protection: ServerProtection = field(default_factory=ServerProtection)
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_schema(cls, data: Dict[str, Any]) -> "Server":
        public_net = data.get("public_net") or {}
        ipv4 = public_net.get("ipv4") or {}
        ipv6 = public_net.get("ipv6") or {}
        image = data.get("image") or {}
        datacenter = data.get("datacenter") or {}
        placement_group = data.get("placement_group") or {}
        protection = data.get("protection") or {}
        return cls(
            id=data["id"],
            name=data["name"],
            status=to_enum(ServerStatus, data["status"], default=ServerStatus.UNKNOWN),
            created=parse_time(data.get("created")),
            server_type=(data.get("server_type") or {}).get("name", ""),
            image=image.get("name") or None,
            location=Location.from_schema(datacenter.get("location")),
            public_ipv4=ipv4.get("ip"),
            public_ipv6=ipv6.get("ip"),
            placement_group=placement_group.get("id"),
            protection=ServerProtection(
                delete=protection.get("delete", False),
                rebuild=protection.get("rebuild", False),
            ),
            labels=data.get("labels") or {},
        )


@dataclass
class ServerListOpts(ListOpts):
    name: str = ""
    status: List[ServerStatus] = field(default_factory=list)
    sort: List[str] = field(default_factory=list)

    def values(self) -> QueryParams:
        params = super().values()
        if self.name:
            params.append(("name", self.name))
        params.extend(("status", ServerStatus(status).value) for status in self.status)
        params.extend(("sort", sort) for sort in self.sort)
        return params


@dataclass
class ServerCreateOpts:
    name: str = ""
    server_type: str = ""
    image: str = ""
    ssh_keys: List["SSHKey"] = field(default_factory=list)
    location: Optional[Location] = None
    user_data: Optional[str] = None
    start_after_create: Optional[bool] = None
    labels: Optional[Dict[str, str]] = None
    placement_group: Optional["PlacementGroup"] = None

    def validate(self) -> None:
        if not self.name:
            raise InvalidOptionsError("missing name")
        if not self.server_type:
            raise InvalidOptionsError("missing server type")
        if not self.image:
            raise InvalidOptionsError("missing image")


@dataclass
class ServerCreateResult:
    server: Server
    action: Optional[Action]
    next_actions: List[Action] = field(default_factory=list)
    root_password: Optional[str] = None


@dataclass
class ServerUpdateOpts:
    name: Optional[str] = None
    labels: Optional[Dict[str, str]] = None


class ServerClient:
    """Client for the Server API."""

    def __init__(self, client: "Client"):
        self._client = client

    def get_by_id(
        self, server_id: int, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[Server], Response]:
        """Retrieve a server by its ID. Returns None if it does not exist."""
        return get_resource(
            self._client, f"/servers/{server_id}", "server", Server.from_schema, cancel=cancel
        )

    def get_by_name(
        self, name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[Server], Optional[Response]]:
        return first_by_name(name, lambda: self.list(ServerListOpts(name=name), cancel=cancel))

    def get(
        self, id_or_name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[Server], Optional[Response]]:
        return get_by_id_or_name(
            id_or_name,
            lambda server_id: self.get_by_id(server_id, cancel=cancel),
            lambda name: self.get_by_name(name, cancel=cancel),
        )

    def list(
        self, opts: Optional[ServerListOpts] = None, cancel: Optional[threading.Event] = None
    ) -> Tuple[List[Server], Response]:
        opts = opts or ServerListOpts()
        body, response = get_request(self._client, "/servers", params=opts.values(), cancel=cancel)
        return [Server.from_schema(item) for item in body.get("servers") or []], response

    def all(self, cancel: Optional[threading.Event] = None) -> List[Server]:
        return self.all_with_opts(ServerListOpts(per_page=50), cancel=cancel)

    def all_with_opts(
        self, opts: ServerListOpts, cancel: Optional[threading.Event] = None
    ) -> List[Server]:
        def fetch_page(page: int) -> Tuple[List[Server], Response]:
            return self.list(replace(opts, page=page), cancel=cancel)

        return iter_pages(self._client, fetch_page, cancel=cancel)

    def create(
        self, opts: ServerCreateOpts, cancel: Optional[threading.Event] = None
    ) -> Tuple[ServerCreateResult, Response]:
        opts.validate()
        req_body = compact(
            name=opts.name,
            server_type=opts.server_type,
            image=opts.image,
            ssh_keys=[key.id for key in opts.ssh_keys] or None,
            location=opts.location.name if opts.location else None,
            user_data=opts.user_data,
            start_after_create=opts.start_after_create,
            labels=opts.labels,
            placement_group=opts.placement_group.id if opts.placement_group else None,
        )
        body, response = post_request(self._client, "/servers", req_body, cancel=cancel)
        result = ServerCreateResult(
            server=Server.from_schema(body["server"]),
            action=Action.from_schema(body["action"]) if body.get("action") else None,
            next_actions=actions_from_schema(body.get("next_actions")),
            root_password=body.get("root_password"),
        )
        return result, response

    def update(
        self, server: Server, opts: ServerUpdateOpts, cancel: Optional[threading.Event] = None
    ) -> Tuple[Server, Response]:
        req_body = compact(name=opts.name, labels=opts.labels)
        body, response = put_request(self._client, f"/servers/{server.id}", req_body, cancel=cancel)
        return Server.from_schema(body["server"]), response

    def delete(
        self, server: Server, cancel: Optional[threading.Event] = None
    ) -> Tuple[Action, Response]:
        """Delete a server. The returned action tracks the deletion."""
        body, response = delete_request(self._client, f"/servers/{server.id}", cancel=cancel)
        return Action.from_schema(body["action"]), response

    def _action(
        self,
        server: Server,
        action: str,
        req_body: Optional[Dict[str, Any]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[Action, Response]:
        body, response = post_request(
            self._client, f"/servers/{server.id}/actions/{action}", req_body, cancel=cancel
        )
        return Action.from_schema(body["action"]), response

    def poweron(self, server: Server, cancel: Optional[threading.Event] = None) -> Tuple[Action, Response]:
        return self._action(server, "poweron", cancel=cancel)

    def poweroff(self, server: Server, cancel: Optional[threading.Event] = None) -> Tuple[Action, Response]:
        """Cut power to a server, like pulling the plug."""
        return self._action(server, "poweroff", cancel=cancel)

    def reboot(self, server: Server, cancel: Optional[threading.Event] = None) -> Tuple[Action, Response]:
        return self._action(server, "reboot", cancel=cancel)

    def reset(self, server: Server, cancel: Optional[threading.Event] = None) -> Tuple[Action, Response]:
        return self._action(server, "reset", cancel=cancel)

    def shutdown(self, server: Server, cancel: Optional[threading.Event] = None) -> Tuple[Action, Response]:
        """Ask the operating system to shut down via ACPI."""
        return self._action(server, "shutdown", cancel=cancel)

    def change_protection(
        self,
        server: Server,
        delete: Optional[bool] = None,
        rebuild: Optional[bool] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[Action, Response]:
        return self._action(
            server, "change_protection", compact(delete=delete, rebuild=rebuild), cancel=cancel
        )
