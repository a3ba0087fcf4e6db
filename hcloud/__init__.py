"""Client library for the Hetzner Cloud API."""

from .action import Action, ActionClient, ActionListOpts, ActionResource, ActionStatus
from .backoff import BackoffFunc, constant_backoff, exponential_backoff
from .certificate import (
    Certificate,
    CertificateClient,
    CertificateCreateOpts,
    CertificateCreateResult,
    CertificateListOpts,
    CertificateStatus,
    CertificateStatusType,
    CertificateType,
    CertificateUpdateOpts,
)
from .client import Client
from .config import ClientConfig, Settings
from .decode import JSONTarget, RawSink
from .exceptions import (
    CancelledError,
    ConstructionError,
    DNSNotFoundError,
    Error,
    ErrorCode,
    HcloudError,
    InvalidIPError,
    InvalidOptionsError,
    ParseError,
    StatusError,
    TransportError,
    error_from_response,
    is_error,
)
from .floating_ip import (
    FloatingIP,
    FloatingIPClient,
    FloatingIPCreateOpts,
    FloatingIPCreateResult,
    FloatingIPListOpts,
    FloatingIPProtection,
    FloatingIPType,
    FloatingIPUpdateOpts,
)
from .helpers import ListOpts, iter_pages
from .location import Location
from .logging_config import setup_logging
from .placement_group import (
    PlacementGroup,
    PlacementGroupClient,
    PlacementGroupCreateOpts,
    PlacementGroupCreateResult,
    PlacementGroupListOpts,
    PlacementGroupType,
    PlacementGroupUpdateOpts,
)
from .response import Pagination, Ratelimit, Response, ResponseMeta, parse_meta
from .server import (
    Server,
    ServerClient,
    ServerCreateOpts,
    ServerCreateResult,
    ServerListOpts,
    ServerProtection,
    ServerStatus,
    ServerUpdateOpts,
)
from .ssh_key import SSHKey, SSHKeyClient, SSHKeyCreateOpts, SSHKeyListOpts, SSHKeyUpdateOpts

__all__ = [
    # Core
    "Client",
    "ClientConfig",
    "Settings",
    "Response",
    "ResponseMeta",
    "Pagination",
    "Ratelimit",
    "parse_meta",
    "ListOpts",
    "iter_pages",
    "JSONTarget",
    "RawSink",
    "setup_logging",

    # Backoff
    "BackoffFunc",
    "constant_backoff",
    "exponential_backoff",

    # Exceptions
    "HcloudError",
    "Error",
    "ErrorCode",
    "StatusError",
    "ConstructionError",
    "TransportError",
    "ParseError",
    "CancelledError",
    "InvalidOptionsError",
    "InvalidIPError",
    "DNSNotFoundError",
    "error_from_response",
    "is_error",

    # Resources
    "Action",
    "ActionClient",
    "ActionListOpts",
    "ActionResource",
    "ActionStatus",
    "Certificate",
    "CertificateClient",
    "CertificateCreateOpts",
    "CertificateCreateResult",
    "CertificateListOpts",
    "CertificateStatus",
    "CertificateStatusType",
    "CertificateType",
    "CertificateUpdateOpts",
    "FloatingIP",
    "FloatingIPClient",
    "FloatingIPCreateOpts",
    "FloatingIPCreateResult",
    "FloatingIPListOpts",
    "FloatingIPProtection",
    "FloatingIPType",
    "FloatingIPUpdateOpts",
    "Location",
    "PlacementGroup",
    "PlacementGroupClient",
    "PlacementGroupCreateOpts",
    "PlacementGroupCreateResult",
    "PlacementGroupListOpts",
    "PlacementGroupType",
    "PlacementGroupUpdateOpts",
    "Server",
    "ServerClient",
    "ServerCreateOpts",
    "ServerCreateResult",
    "ServerListOpts",
    "ServerProtection",
    "ServerStatus",
    "ServerUpdateOpts",
    "SSHKey",
    "SSHKeyClient",
    "SSHKeyCreateOpts",
    "SSHKeyListOpts",
    "SSHKeyUpdateOpts",
]
