"""Destinations a successful response body can be decoded into."""

import json
from typing import Any, Optional, Protocol, Union, runtime_checkable


@runtime_checkable
class RawSink(Protocol):
    """Anything accepting raw bytes, e.g. ``io.BytesIO`` or a binary file."""

    def write(self, data: bytes) -> Any:
        ...


class JSONTarget:
    """Holds the JSON-decoded body after a request completed."""

    def __init__(self) -> None:
        self.value: Any = None

    def decode(self, body: bytes) -> None:
        self.value = json.loads(body) if body else None


DecodeTarget = Union[RawSink, JSONTarget]


def decode_into(target: Optional[DecodeTarget], body: bytes) -> None:
    """Copy ``body`` verbatim into a raw sink or JSON-decode it into a JSONTarget."""
    if target is None:
        return
    if isinstance(target, JSONTarget):
        target.decode(body)
    elif isinstance(target, RawSink):
        target.write(body)
    else:
        raise TypeError(f"unsupported decode target: {type(target).__name__}")
