"""
Print job encoder.

Builds the complete byte stream for a greeting receipt: the greeting line
printed four times in different styles, the stored logo, a Code128 barcode,
then a cut followed by arming presenter auto-recovery.

Layout:
    pitch12 G LF
    emphasizeOn pitch15 G emphasizeOff LF
    underlineOn pitch16 G underlineOff LF
    inverseOn G inverseOff LF
    printLogo LF
    printBarcode LF
    cut armRecovery

The printer only understands single-byte text, so the display name passes
through a NameEncodingPolicy before it reaches the stream.
"""

from __future__ import annotations

import unicodedata
from enum import Enum
from typing import List

from core.exceptions import NameEncodingError
from .star_commands import lookup


DEFAULT_GREETING_TEMPLATE = "Hello {name}, welcome to this IoT Edge module running on Ubuntu!"

REPLACEMENT_CHAR = "?"


class NameEncodingPolicy(Enum):
    """How characters outside printable ASCII in a display name are handled."""

    REPLACE = "replace"
    """Substitute '?' for each unrepresentable character."""

    TRANSLITERATE = "transliterate"
    """Strip accents first (é -> e), then substitute '?' for what is left."""

    STRICT = "strict"
    """Reject the name with NameEncodingError."""


def _is_printable_ascii(char: str) -> bool:
    return " " <= char <= "~"


def sanitize_name(name: str, policy: NameEncodingPolicy = NameEncodingPolicy.REPLACE) -> str:
    """
    Apply ``policy`` to ``name`` and return a printable-ASCII string.

    Control characters (including ESC) are treated like non-ASCII text so a
    name can never inject printer commands into the stream.

    Raises:
        NameEncodingError: Under the strict policy, if anything is unrepresentable
    """
    if policy is NameEncodingPolicy.STRICT:
        offending = "".join(c for c in name if not _is_printable_ascii(c))
        if offending:
            raise NameEncodingError(name, offending)
        return name

    if policy is NameEncodingPolicy.TRANSLITERATE:
        decomposed = unicodedata.normalize("NFKD", name)
        name = "".join(c for c in decomposed if not unicodedata.combining(c))

    return "".join(c if _is_printable_ascii(c) else REPLACEMENT_CHAR for c in name)


class PrintJobEncoder:
    """
    Encodes a display name into a TUP900 print job.

    The encoder is pure: it never touches the device. Writing the result and
    reporting write failures is the caller's job.
    """

    def __init__(
        self,
        policy: NameEncodingPolicy = NameEncodingPolicy.REPLACE,
        greeting_template: str = DEFAULT_GREETING_TEMPLATE
    ):
        self.policy = policy
        self.greeting_template = greeting_template

    def greeting(self, display_name: str) -> bytes:
        """Render the greeting line for ``display_name`` as ASCII bytes."""
        safe_name = sanitize_name(display_name, self.policy)
        return self.greeting_template.format(name=safe_name).encode("ascii")

    def encode(self, display_name: str) -> bytes:
        """
        Build the full job for ``display_name``.

        Args:
            display_name: Name substituted into the greeting (may be empty)

        Returns:
            Byte stream ready to be written to the printer

        Raises:
            NameEncodingError: If the strict policy rejects the name
        """
        text = self.greeting(display_name)
        lf = lookup("lineFeed").data

        parts: List[bytes] = [
            lookup("pitch12").data, text, lf,

            lookup("emphasizeOn").data, lookup("pitch15").data, text,
            lookup("emphasizeOff").data, lf,

            lookup("underlineOn").data, lookup("pitch16").data, text,
            lookup("underlineOff").data, lf,

            lookup("inverseOn").data, text, lookup("inverseOff").data, lf,

            lookup("printLogo").data, lf,
            lookup("printBarcode").data, lf,

            lookup("cut").data,
            lookup("armRecovery").data,
        ]
        return b"".join(parts)


def encode(display_name: str, policy: NameEncodingPolicy = NameEncodingPolicy.REPLACE) -> bytes:
    """Encode a print job with the default greeting (convenience function)."""
    return PrintJobEncoder(policy).encode(display_name)
