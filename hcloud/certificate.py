"""TLS certificates, either uploaded or managed by the provider."""

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


class CertificateType(str, Enum):
    UPLOADED = "uploaded"
    MANAGED = "managed"


class CertificateStatusType(str, Enum):
    PENDING = "pending"
    FAILED = "failed"
    COMPLETED = "completed"
    UNKNOWN = "unknown"
    UNAVAILABLE = "unavailable"


@dataclass
class CertificateUsedByRef:
    id: int
    type: str


@dataclass
class CertificateStatus:
    """Issuance and renewal status of a managed certificate."""

    issuance: Optional[CertificateStatusType] = None
    renewal: Optional[CertificateStatusType] = None
    error_code: str = ""
    error_message: str = ""

    def is_failed(self) -> bool:
        return self.issuance == CertificateStatusType.FAILED


def _status_type(value: Optional[str]) -> Optional[CertificateStatusType]:
    if not value:
        return None
    return to_enum(CertificateStatusType, value, default=CertificateStatusType.UNKNOWN)


@dataclass
class Certificate:
    id: int
    name: str
    type: Union[CertificateType, str]
    certificate: str = ""
    fingerprint: str = ""
    domain_names: List[str] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    created: Optional[datetime] = None
    not_valid_before: Optional[datetime] = None
    not_valid_after: Optional[datetime] = None
    status: Optional[CertificateStatus] = None
    used_by: List[CertificateUsedByRef] = field(default_factory=list)

    @classmethod
    def from_schema(cls, data: Dict[str, Any]) -> "Certificate":
        status = None
        if data.get("status"):
            raw = data["status"]
            error = raw.get("error") or {}
            status = CertificateStatus(
                issuance=_status_type(raw.get("issuance")),
                renewal=_status_type(raw.get("renewal")),
                error_code=error.get("code", ""),
                error_message=error.get("message", ""),
            )
        return cls(
            id=data["id"],
            name=data["name"],
            type=to_enum(CertificateType, data.get("type") or CertificateType.UPLOADED.value),
            certificate=data.get("certificate") or "",
            fingerprint=data.get("fingerprint") or "",
            domain_names=list(data.get("domain_names") or []),
            labels=data.get("labels") or {},
            created=parse_time(data.get("created")),
            not_valid_before=parse_time(data.get("not_valid_before")),
            not_valid_after=parse_time(data.get("not_valid_after")),
            status=status,
            used_by=[CertificateUsedByRef(id=ref["id"], type=ref["type"]) for ref in data.get("used_by") or []],
        )


@dataclass
class CertificateListOpts(ListOpts):
    name: str = ""
    type: List[CertificateType] = field(default_factory=list)
    sort: List[str] = field(default_factory=list)

    def values(self) -> QueryParams:
        params = super().values()
        if self.name:
            params.append(("name", self.name))
        params.extend(("type", CertificateType(cert_type).value) for cert_type in self.type)
        params.extend(("sort", sort) for sort in self.sort)
        return params


@dataclass
class CertificateCreateOpts:
    """Options for creating a certificate.

    Uploaded certificates need ``certificate`` and ``private_key``, managed
    certificates need ``domain_names``.
    """

    name: str = ""
    type: Optional[CertificateType] = None
    certificate: str = ""
    private_key: str = ""
    domain_names: List[str] = field(default_factory=list)
    labels: Optional[Dict[str, str]] = None

    def validate(self) -> None:
        if not self.name:
            raise InvalidOptionsError.missing_field(self, "name")
        if self.type is None or self.type == CertificateType.UPLOADED:
            self._validate_uploaded()
        elif self.type == CertificateType.MANAGED:
            self._validate_managed()
        else:
            raise InvalidOptionsError.invalid_field_value(self, "type", self.type)

    def _validate_uploaded(self) -> None:
        if not self.certificate:
            raise InvalidOptionsError.missing_field(self, "certificate")
        if not self.private_key:
            raise InvalidOptionsError.missing_field(self, "private_key")

    def _validate_managed(self) -> None:
        if not self.domain_names:
            raise InvalidOptionsError.missing_field(self, "domain_names")


@dataclass
class CertificateCreateResult:
    certificate: Certificate
    action: Optional[Action]


@dataclass
class CertificateUpdateOpts:
    name: Optional[str] = None
    labels: Optional[Dict[str, str]] = None


class CertificateClient:
    """Client for the Certificates API."""

    def __init__(self, client: "Client"):
        self._client = client

    def get_by_id(
        self, certificate_id: int, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[Certificate], Response]:
        """Retrieve a certificate by its ID. Returns None if it does not exist."""
        return get_resource(
            self._client,
            f"/certificates/{certificate_id}",
            "certificate",
            Certificate.from_schema,
            cancel=cancel,
        )

    def get_by_name(
        self, name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[Certificate], Optional[Response]]:
        return first_by_name(name, lambda: self.list(CertificateListOpts(name=name), cancel=cancel))

    def get(
        self, id_or_name: str, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[Certificate], Optional[Response]]:
        return get_by_id_or_name(
            id_or_name,
            lambda certificate_id: self.get_by_id(certificate_id, cancel=cancel),
            lambda name: self.get_by_name(name, cancel=cancel),
        )

    def list(
        self, opts: Optional[CertificateListOpts] = None, cancel: Optional[threading.Event] = None
    ) -> Tuple[List[Certificate], Response]:
        """Return the certificates of one page."""
        opts = opts or CertificateListOpts()
        body, response = get_request(
            self._client, "/certificates", params=opts.values(), cancel=cancel
        )
        return [Certificate.from_schema(item) for item in body.get("certificates") or []], response

    def all(self, cancel: Optional[threading.Event] = None) -> List[Certificate]:
        return self.all_with_opts(CertificateListOpts(per_page=50), cancel=cancel)

    def all_with_opts(
        self, opts: CertificateListOpts, cancel: Optional[threading.Event] = None
    ) -> List[Certificate]:
        def fetch_page(page: int) -> Tuple[List[Certificate], Response]:
            return self.list(replace(opts, page=page), cancel=cancel)

        return iter_pages(self._client, fetch_page, cancel=cancel)

    def create(
        self, opts: CertificateCreateOpts, cancel: Optional[threading.Event] = None
    ) -> Tuple[CertificateCreateResult, Response]:
        """Create an uploaded or a managed certificate.

        Managed certificates are issued asynchronously; the returned action
        tracks the issuance.
        """
        opts.validate()
        if opts.type == CertificateType.MANAGED:
            req_body = compact(
                name=opts.name,
                type=CertificateType.MANAGED.value,
                domain_names=opts.domain_names,
                labels=opts.labels,
            )
        else:
            req_body = compact(
                name=opts.name,
                type=CertificateType.UPLOADED.value,
                certificate=opts.certificate,
                private_key=opts.private_key,
                labels=opts.labels,
            )

        body, response = post_request(self._client, "/certificates", req_body, cancel=cancel)
        action = Action.from_schema(body["action"]) if body.get("action") else None
        result = CertificateCreateResult(
            certificate=Certificate.from_schema(body["certificate"]),
            action=action,
        )
        return result, response

    def update(
        self,
        certificate: Certificate,
        opts: CertificateUpdateOpts,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[Certificate, Response]:
        req_body = compact(name=opts.name, labels=opts.labels)
        body, response = put_request(
            self._client, f"/certificates/{certificate.id}", req_body, cancel=cancel
        )
        return Certificate.from_schema(body["certificate"]), response

    def delete(self, certificate: Certificate, cancel: Optional[threading.Event] = None) -> Response:
        return delete_request_no_result(
            self._client, f"/certificates/{certificate.id}", cancel=cancel
        )

    def retry_issuance(
        self, certificate: Certificate, cancel: Optional[threading.Event] = None
    ) -> Tuple[Action, Response]:
        """Retry a failed issuance or renewal of a managed certificate."""
        body, response = post_request(
            self._client, f"/certificates/{certificate.id}/actions/retry", cancel=cancel
        )
        return Action.from_schema(body["action"]), response
