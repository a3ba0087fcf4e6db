"""Locations referenced by other resources."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Location:
    id: int = 0
    name: str = ""
    description: str = ""
    country: str = ""
    city: str = ""
    network_zone: str = ""

    @classmethod
    def from_schema(cls, data: Optional[Dict[str, Any]]) -> Optional["Location"]:
        if not data:
            return None
        return cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            description=data.get("description", ""),
            country=data.get("country", ""),
            city=data.get("city", ""),
            network_zone=data.get("network_zone", ""),
        )
