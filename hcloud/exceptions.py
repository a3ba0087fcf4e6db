"""Exceptions raised by the hcloud client and the classifier for API error bodies."""

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

if TYPE_CHECKING:
    from .response import Response

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes returned by the API in ``error.code``."""

    SERVICE_ERROR = "service_error"  # Generic service error
    LIMIT_REACHED = "limit_reached"  # Ratelimit reached
    UNKNOWN_ERROR = "unknown_error"  # Unknown error
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    LOCKED = "locked"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    RESOURCE_UNAVAILABLE = "resource_unavailable"
    UNIQUENESS_ERROR = "uniqueness_error"
    PROTECTED = "protected"
    MAINTENANCE = "maintenance"
    JSON_ERROR = "json_error"

    def __str__(self) -> str:
        return self.value


class HcloudError(Exception):
    """Base exception for all errors raised by this library."""

    def __init__(self, message: str, response: Optional["Response"] = None):
        self.message = message
        self.response = response
        super().__init__(message)


class ConstructionError(HcloudError):
    """Raised when a request cannot be built from the given inputs."""
    pass


class TransportError(HcloudError):
    """Raised when the HTTP request fails before a response is received."""
    pass


class ParseError(HcloudError):
    """Raised when the response envelope is not valid JSON."""
    pass


class CancelledError(HcloudError):
    """Raised when a caller cancels a pending operation."""

    def __init__(self, message: str = "operation cancelled"):
        super().__init__(message)


class Error(HcloudError):
    """An error reported by the API in the ``error`` object of a response."""

    def __init__(
        self,
        code: Union[ErrorCode, str],
        message: str,
        details: Optional[Dict[str, Any]] = None,
        response: Optional["Response"] = None,
    ):
        self.code = _to_code(code)
        self.details = details
        super().__init__(message, response=response)

    def __str__(self) -> str:
        return f"{self.message} ({self.code})"

    def __repr__(self) -> str:
        return f"Error(code={str(self.code)!r}, message={self.message!r})"


class StatusError(HcloudError):
    """Raised for a 4xx/5xx response without a structured error body."""

    def __init__(self, status_code: int, response: Optional["Response"] = None):
        self.status_code = status_code
        super().__init__(
            f"hcloud: server responded with status code {status_code}",
            response=response,
        )


class InvalidOptionsError(HcloudError, ValueError):
    """Raised when create or update options fail client-side validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    @classmethod
    def missing_field(cls, opts: Any, field: str) -> "InvalidOptionsError":
        return cls(f"missing field [{field}] in [{type(opts).__name__}]", field=field)

    @classmethod
    def invalid_field_value(cls, opts: Any, field: str, value: Any) -> "InvalidOptionsError":
        return cls(
            f"invalid value '{value}' for field [{field}] in [{type(opts).__name__}]",
            field=field,
        )


class InvalidIPError(HcloudError, ValueError):
    """Raised when a string is not a valid IP address."""

    def __init__(self, ip: str):
        self.ip = ip
        super().__init__(f"could not parse ip address {ip}")


class DNSNotFoundError(HcloudError, LookupError):
    """Raised when no reverse DNS entry exists for an IP address."""

    def __init__(self, ip: str):
        self.ip = ip
        super().__init__(f"dns for ip {ip} not found")


def _to_code(code: Union[ErrorCode, str]) -> Union[ErrorCode, str]:
    try:
        return ErrorCode(code)
    except ValueError:
        # Codes added to the API later are kept verbatim.
        return code


def is_json_content_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.startswith("application/json")


def error_from_response(content_type: Optional[str], body: bytes) -> Optional[Error]:
    """
    Build an Error from the JSON body of a failed response.

    Args:
        content_type (Optional[str]): Value of the Content-Type header
        body (bytes): Buffered response body

    Returns:
        Optional[Error]: The structured error, or None when the body does not
        carry one and the caller has to fall back to the status code
    """
    if not is_json_content_type(content_type):
        return None

    try:
        data = json.loads(body)
    except ValueError:
        logger.debug("Error body is not valid JSON")
        return None

    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return None

    code = error.get("code") or ""
    message = error.get("message") or ""
    if not code and not message:
        return None

    details = error.get("details")
    return Error(code, message, details=details if isinstance(details, dict) else None)


def is_error(exception: BaseException, code: Union[ErrorCode, str]) -> bool:
    """Tell whether ``exception`` is an API Error with the given code."""
    return isinstance(exception, Error) and exception.code == code
