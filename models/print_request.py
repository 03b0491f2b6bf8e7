"""Request model for the ``print`` method."""

from __future__ import annotations

import json
from dataclasses import dataclass

from core.exceptions import MalformedRequestError


@dataclass(frozen=True)
class PrintJobRequest:
    """Display name to print. Empty when the payload omits it or sends null."""

    name: str = ""

    @classmethod
    def from_payload(cls, payload: bytes) -> "PrintJobRequest":
        """
        Parse a UTF-8 JSON ``{"name": ...}`` payload.

        Raises:
            MalformedRequestError: If the payload is not UTF-8 JSON, not an
                object, or ``name`` is neither a string nor null
        """
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedRequestError(f"Payload is not valid UTF-8: {e}", payload) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedRequestError(f"Payload is not valid JSON: {e}", payload) from e

        if not isinstance(data, dict):
            raise MalformedRequestError(
                f"Payload must be a JSON object, got {type(data).__name__}", payload
            )

        name = data.get("name")
        if name is None:
            return cls()
        if not isinstance(name, str):
            raise MalformedRequestError(
                f"'name' must be a string, got {type(name).__name__}", payload
            )
        return cls(name=name)
