"""Actions: asynchronous operations started by other API calls."""

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from .exceptions import Error
from .helpers import ListOpts, QueryParams, get_request, get_resource, iter_pages, parse_time, to_enum
from .response import Response

if TYPE_CHECKING:
    from .client import Client


class ActionStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ActionResource:
    """A resource an action operates on."""

    id: int
    type: str


@dataclass
class Action:
    """An action in the Hetzner Cloud."""

    id: int
    status: Union[ActionStatus, str]
    command: str
    progress: int = 0
    started: Optional[datetime] = None
    finished: Optional[datetime] = None
    error_code: str = ""
    error_message: str = ""
    resources: List[ActionResource] = field(default_factory=list)

    @classmethod
    def from_schema(cls, data: Dict[str, Any]) -> "Action":
        error = data.get("error") or {}
        return cls(
            id=data["id"],
            status=to_enum(ActionStatus, data["status"]),
            command=data.get("command", ""),
            progress=data.get("progress", 0),
            started=parse_time(data.get("started")),
            finished=parse_time(data.get("finished")),
            error_code=error.get("code", ""),
            error_message=error.get("message", ""),
            resources=[ActionResource(id=r["id"], type=r["type"]) for r in data.get("resources") or []],
        )

    def error(self) -> Optional[Error]:
        """The error of a failed action, None otherwise."""
        if self.error_code and self.error_message:
            return Error(self.error_code, self.error_message)
        return None


def actions_from_schema(items: Optional[List[Dict[str, Any]]]) -> List[Action]:
    return [Action.from_schema(item) for item in items or []]


@dataclass
class ActionListOpts(ListOpts):
    """Options for listing actions."""

    id: List[int] = field(default_factory=list)
    status: List[ActionStatus] = field(default_factory=list)
    sort: List[str] = field(default_factory=list)

    def values(self) -> QueryParams:
        params = super().values()
        params.extend(("id", str(action_id)) for action_id in self.id)
        params.extend(("status", ActionStatus(status).value) for status in self.status)
        params.extend(("sort", sort) for sort in self.sort)
        return params


class ActionClient:
    """Client for the Action API."""

    def __init__(self, client: "Client"):
        self._client = client

    def get_by_id(
        self, action_id: int, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[Action], Response]:
        """Retrieve an action by its ID. Returns None if it does not exist."""
        return get_resource(
            self._client, f"/actions/{action_id}", "action", Action.from_schema, cancel=cancel
        )

    def list(
        self, opts: Optional[ActionListOpts] = None, cancel: Optional[threading.Event] = None
    ) -> Tuple[List[Action], Response]:
        """Return the actions of one page."""
        opts = opts or ActionListOpts()
        body, response = get_request(self._client, "/actions", params=opts.values(), cancel=cancel)
        return actions_from_schema(body.get("actions")), response

    def all(self, cancel: Optional[threading.Event] = None) -> List[Action]:
        return self.all_with_opts(ActionListOpts(per_page=50), cancel=cancel)

    def all_with_opts(
        self, opts: ActionListOpts, cancel: Optional[threading.Event] = None
    ) -> List[Action]:
        def fetch_page(page: int) -> Tuple[List[Action], Response]:
            return self.list(replace(opts, page=page), cancel=cancel)

        return iter_pages(self._client, fetch_page, cancel=cancel)
