"""
Automatic Status Block (ASB) decoder.

After ``enableStatusReporting`` is written the TUP900 answers with a status
block (10 bytes requested). Two conditions are read from it, per the Star
Line Mode manual (byte offsets are 0-indexed):

    byte 5, bit 0x04  - paper roll sensor: set when the roll is missing
    byte 8, bits 0x04 and 0x02 - presenter paper sensors: both clear when the
                                 receipt was collected (or none is present)

A block shorter than 9 bytes cannot carry byte 8 and is reported as a short
read, never decoded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

ASB_REQUEST_SIZE = 10
ASB_MIN_LENGTH = 9

ROLL_SENSOR_BYTE = 5
ROLL_MISSING_MASK = 0x04

PRESENTER_SENSOR_BYTE = 8
PRESENTER_PAPER_MASKS = (0x04, 0x02)


class StatusOutcome(Enum):
    OK = "ok"
    NO_RESPONSE = "no_response"
    SHORT_RESPONSE = "short_response"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class DeviceStatus:
    """Decoded printer status. Flags are False unless the outcome is OK."""

    outcome: StatusOutcome
    paper_collected: bool = False
    roll_missing: bool = False
    raw: bytes = b""
    message: str = ""

    @property
    def is_complete(self) -> bool:
        return self.outcome is StatusOutcome.OK

    @property
    def raw_hex(self) -> str:
        return self.raw.hex().upper()


def decode(raw: bytes) -> DeviceStatus:
    """
    Decode an ASB buffer into a DeviceStatus.

    Args:
        raw: Bytes read from the printer (any length)

    Returns:
        DeviceStatus with outcome OK, NO_RESPONSE or SHORT_RESPONSE
    """
    raw = bytes(raw)

    if not raw:
        return DeviceStatus(
            outcome=StatusOutcome.NO_RESPONSE,
            message="No response from status request.",
        )

    if len(raw) < ASB_MIN_LENGTH:
        return DeviceStatus(
            outcome=StatusOutcome.SHORT_RESPONSE,
            raw=raw,
            message=f"Short response from status request ({len(raw)} of {ASB_MIN_LENGTH} bytes).",
        )

    presenter = raw[PRESENTER_SENSOR_BYTE]
    paper_collected = all((presenter & mask) == 0 for mask in PRESENTER_PAPER_MASKS)
    roll_missing = (raw[ROLL_SENSOR_BYTE] & ROLL_MISSING_MASK) != 0

    return DeviceStatus(
        outcome=StatusOutcome.OK,
        paper_collected=paper_collected,
        roll_missing=roll_missing,
        raw=raw,
        message="Status method called and status read.",
    )


def timed_out(timeout_seconds: float) -> DeviceStatus:
    """Status for a read that produced no data before the timeout."""
    return DeviceStatus(
        outcome=StatusOutcome.TIMED_OUT,
        message=f"Status request timed out after {timeout_seconds:.1f}s.",
    )
