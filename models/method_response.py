"""
Method response and event models.

These are the JSON bodies the agent returns for the ``print`` and ``status``
methods and publishes on the event output. Field names are part of the
control-plane contract (camelCase).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PrintResponse:
    """Outcome of a ``print`` invocation."""

    device_id: str
    status: str = "Message deserialized and printed."
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deviceId": self.device_id,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status,
        }


@dataclass
class StatusResponse:
    """Outcome of a ``status`` invocation."""

    device_id: str
    status: str = "Status method called and status read."
    paper_collected: bool = False
    roll_missing: bool = False
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deviceId": self.device_id,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status,
            "paperCollected": self.paper_collected,
            "rollMissing": self.roll_missing,
        }


@dataclass(frozen=True)
class MethodResponse:
    """Synchronous reply to a method invocation: UTF-8 JSON payload plus status code."""

    payload: bytes
    status: int

    @classmethod
    def from_body(cls, body: Dict[str, Any], status: int) -> "MethodResponse":
        return cls(payload=json.dumps(body).encode("utf-8"), status=status)

    def json(self) -> Dict[str, Any]:
        return json.loads(self.payload.decode("utf-8"))


@dataclass(frozen=True)
class EventMessage:
    """An event published on a named output."""

    output_name: str
    body: bytes
    content_type: str = "application/json"
    content_encoding: str = "utf-8"
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outputName": self.output_name,
            "contentType": self.content_type,
            "contentEncoding": self.content_encoding,
            "createdAt": self.created_at.isoformat(),
            "body": json.loads(self.body.decode(self.content_encoding)),
        }
