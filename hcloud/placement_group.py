"""Placement groups: control how servers are spread across hosts."""

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from .action import Action
from .exceptions import InvalidOptionsError
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
from .response import Response

if TYPE_CHECKING:
    from .client import Client


class PlacementGroupType(str, Enum):
    SPREAD = "spread"


@dataclass
class PlacementGroup:
    id: int
    name: str
    type: Union[PlacementGroupType, str]
    labels: Dict[str, str] = field(default_factory=dict)
    created: Optional[datetime] = None
    servers: List[int] = field(default_factory=list)

    @classmethod
    def from_schema(cls, data: Dict[str, Any]) -> "PlacementGroup":
        return cls(
            id=data["id"],
            name=data["name"],
            type=to_enum(PlacementGroupType, data["type"]),
            labels=data.get("labels") or {},
            created=parse_time(data.get("created")),
            servers=list(data.get("servers") or []),
        )


@dataclass
class PlacementGroupListOpts(ListOpts):
    name: str = ""
    type: Optional[PlacementGroupType] = None
    sort: List[str] = field(default_factory=list)

    def values(self) -> QueryParams:
        params = super().values()
        if self.name:
            params.append(("name", self.name))
        if self.type:
            params.append(("type", PlacementGroupType(self.type).value))
        params.extend(("sort", sort) for sort in self.sort)
        return params


@dataclass
class PlacementGroupCreateOpts:
    name: str
    type: Union[PlacementGroupType, str]
    labels: Optional[Dict[str, str]] = None

    def validate(self) -> None:
        if not self.name:
            raise InvalidOptionsError("missing name")
        try:
            PlacementGroupType(self.type)
        except ValueError:
            raise InvalidOptionsError("missing or invalid type") from None


@dataclass
class PlacementGroupCreateResult:
    placement_group: PlacementGroup
    action: Optional[Action]


@dataclass
class PlacementGroupUpdateOpts:
    name: Optional[str] = None
    labels: Optional[Dict[str, str]] = None


class PlacementGroupClient:
    """Client for the Placement Group API."""

    def __init__(self, client: "Client"):
        self._client = client

    def get_by_id(
        self, placement_group_id: int, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[PlacementGroup], Response]:
        """Retrieve a placement group by its ID. Returns None if it does not exist."""
        return get_resource(
            self._client,
            f"/placement_groups/{placement_group_id}",
            "placement_group",
            PlacementGroup.from_schema,
            cancel=cancel,
        )

    def get_by_name(
        self, name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[PlacementGroup], Optional[Response]]:
        return first_by_name(name, lambda: self.list(PlacementGroupListOpts(name=name), cancel=cancel))

    def get(
        self, id_or_name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[PlacementGroup], Optional[Response]]:
        return get_by_id_or_name(
            id_or_name,
            lambda placement_group_id: self.get_by_id(placement_group_id, cancel=cancel),
            lambda name: self.get_by_name(name, cancel=cancel),
        )

    def list(
        self,
        opts: Optional[PlacementGroupListOpts] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[List[PlacementGroup], Response]:
        """Return the placement groups of one page.

        Filters left at their zero value are not sent.
        """
        opts = opts or PlacementGroupListOpts()
        body, response = get_request(
            self._client, "/placement_groups", params=opts.values(), cancel=cancel
        )
        groups = [PlacementGroup.from_schema(item) for item in body.get("placement_groups") or []]
        return groups, response

    def all(self, cancel: Optional[threading.Event] = None) -> List[PlacementGroup]:
        return self.all_with_opts(PlacementGroupListOpts(per_page=50), cancel=cancel)

    def all_with_opts(
        self, opts: PlacementGroupListOpts, cancel: Optional[threading.Event] = None
    ) -> List[PlacementGroup]:
        def fetch_page(page: int) -> Tuple[List[PlacementGroup], Response]:
            return self.list(replace(opts, page=page), cancel=cancel)

        return iter_pages(self._client, fetch_page, cancel=cancel)

    def create(
        self, opts: PlacementGroupCreateOpts, cancel: Optional[threading.Event] = None
    ) -> Tuple[PlacementGroupCreateResult, Response]:
        opts.validate()
        req_body = compact(
            name=opts.name,
            type=PlacementGroupType(opts.type).value,
            labels=opts.labels,
        )
        body, response = post_request(self._client, "/placement_groups", req_body, cancel=cancel)
        action = Action.from_schema(body["action"]) if body.get("action") else None
        result = PlacementGroupCreateResult(
            placement_group=PlacementGroup.from_schema(body["placement_group"]),
            action=action,
        )
        return result, response

    def update(
        self,
        placement_group: PlacementGroup,
        opts: PlacementGroupUpdateOpts,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[PlacementGroup, Response]:
        req_body = compact(name=opts.name, labels=opts.labels)
        body, response = put_request(
            self._client, f"/placement_groups/{placement_group.id}", req_body, cancel=cancel
        )
        return PlacementGroup.from_schema(body["placement_group"]), response

    def delete(
        self, placement_group: PlacementGroup, cancel: Optional[threading.Event] = None
    ) -> Response:
        return delete_request_no_result(
            self._client, f"/placement_groups/{placement_group.id}", cancel=cancel
        )
