"""SSH keys injected into servers at creation."""

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

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
)
from .response import Response

if TYPE_CHECKING:
    from .client import Client


@dataclass
class SSHKey:
    id: int
    name: str
    fingerprint: str
    public_key: str
    labels: Dict[str, str] = field(default_factory=dict)
    created: Optional[datetime] = None

    @classmethod
    def from_schema(cls, data: Dict[str, Any]) -> "SSHKey":
        return cls(
            id=data["id"],
            name=data["name"],
            fingerprint=data.get("fingerprint", ""),
            public_key=data.get("public_key", ""),
            labels=data.get("labels") or {},
            created=parse_time(data.get("created")),
        )


@dataclass
class SSHKeyListOpts(ListOpts):
    name: str = ""
    fingerprint: str = ""

    def values(self) -> QueryParams:
        params = super().values()
        if self.name:
            params.append(("name", self.name))
        if self.fingerprint:
            params.append(("fingerprint", self.fingerprint))
        return params


@dataclass
class SSHKeyCreateOpts:
    name: str
    public_key: str
    labels: Optional[Dict[str, str]] = None

    def validate(self) -> None:
        if not self.name:
            raise InvalidOptionsError("missing name")
        if not self.public_key:
            raise InvalidOptionsError("missing public key")


@dataclass
class SSHKeyUpdateOpts:
    name: Optional[str] = None
    labels: Optional[Dict[str, str]] = None


class SSHKeyClient:
    """Client for the SSH key API."""

    def __init__(self, client: "Client"):
        self._client = client

    def get_by_id(
        self, ssh_key_id: int, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[SSHKey], Response]:
        """Retrieve an SSH key by its ID. Returns None if it does not exist."""
        return get_resource(
            self._client, f"/ssh_keys/{ssh_key_id}", "ssh_key", SSHKey.from_schema, cancel=cancel
        )

    def get_by_name(
        self, name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[SSHKey], Optional[Response]]:
        return first_by_name(name, lambda: self.list(SSHKeyListOpts(name=name), cancel=cancel))

    def get_by_fingerprint(
        self, fingerprint: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[SSHKey], Response]:
        """Retrieve an SSH key by its fingerprint. Returns None if it does not exist."""
        keys, response = self.list(SSHKeyListOpts(fingerprint=fingerprint), cancel=cancel)
        return (keys[0] if keys else None), response

    def get(
        self, id_or_name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[SSHKey], Optional[Response]]:
        return get_by_id_or_name(
            id_or_name,
            lambda ssh_key_id: self.get_by_id(ssh_key_id, cancel=cancel),
            lambda name: self.get_by_name(name, cancel=cancel),
        )

    def list(
        self, opts: Optional[SSHKeyListOpts] = None, cancel: Optional[threading.Event] = None
    ) -> Tuple[List[SSHKey], Response]:
        opts = opts or SSHKeyListOpts()
        body, response = get_request(self._client, "/ssh_keys", params=opts.values(), cancel=cancel)
        return [SSHKey.from_schema(item) for item in body.get("ssh_keys") or []], response

    def all(self, cancel: Optional[threading.Event] = None) -> List[SSHKey]:
        return self.all_with_opts(SSHKeyListOpts(per_page=50), cancel=cancel)

    def all_with_opts(
        self, opts: SSHKeyListOpts, cancel: Optional[threading.Event] = None
    ) -> List[SSHKey]:
        def fetch_page(page: int) -> Tuple[List[SSHKey], Response]:
            return self.list(replace(opts, page=page), cancel=cancel)

        return iter_pages(self._client, fetch_page, cancel=cancel)

    def create(
        self, opts: SSHKeyCreateOpts, cancel: Optional[threading.Event] = None
    ) -> Tuple[SSHKey, Response]:
        opts.validate()
        req_body = compact(name=opts.name, public_key=opts.public_key, labels=opts.labels)
        body, response = post_request(self._client, "/ssh_keys", req_body, cancel=cancel)
        return SSHKey.from_schema(body["ssh_key"]), response

    def update(
        self, ssh_key: SSHKey, opts: SSHKeyUpdateOpts, cancel: Optional[threading.Event] = None
    ) -> Tuple[SSHKey, Response]:
        req_body = compact(name=opts.name, labels=opts.labels)
        body, response = put_request(self._client, f"/ssh_keys/{ssh_key.id}", req_body, cancel=cancel)
        return SSHKey.from_schema(body["ssh_key"]), response

    def delete(self, ssh_key: SSHKey, cancel: Optional[threading.Event] = None) -> Response:
        return delete_request_no_result(self._client, f"/ssh_keys/{ssh_key.id}", cancel=cancel)
