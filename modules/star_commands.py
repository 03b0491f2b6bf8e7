"""
Star Line Mode command catalog for the TUP900.

Every control code the agent sends is defined here once, as an immutable
CommandCode, and exposed through a read-only mapping. Byte values follow the
Star Line Mode command manual and must not be changed - the printer firmware
matches them exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class CommandCode:
    """A named printer control sequence."""

    name: str
    data: bytes
    description: str = ""

    def __post_init__(self):
        if not self.data:
            raise ValueError(f"Command '{self.name}' has no bytes")

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def hex(self) -> str:
        return self.data.hex(" ").upper()


_CATALOG: Tuple[CommandCode, ...] = (
    # Line feed (includes carriage return in Line Mode)
    CommandCode("lineFeed", b"\x0a", "line feed"),

    # Character pitch (white space between characters)
    CommandCode("pitch12", b"\x1b\x4d", "12-dot character pitch"),
    CommandCode("pitch15", b"\x1b\x50", "15-dot character pitch"),
    CommandCode("pitch16", b"\x1b\x3a", "16-dot character pitch"),

    CommandCode("emphasizeOn", b"\x1b\x45", "select emphasized printing"),
    CommandCode("emphasizeOff", b"\x1b\x46", "cancel emphasized printing"),

    CommandCode("underlineOn", b"\x1b\x2d\x01", "select underline"),
    CommandCode("underlineOff", b"\x1b\x2d\x00", "cancel underline"),

    CommandCode("inverseOn", b"\x1b\x34", "select white/black inverse"),
    CommandCode("inverseOff", b"\x1b\x35", "cancel white/black inverse"),

    CommandCode("cut", b"\x1b\x64\x02", "partial cut"),

    # ESC FS p n m: print NV logo 1, normal size
    CommandCode("printLogo", b"\x1b\x1c\x70\x01\x00", "print preloaded logo"),

    # ESC b n1 n2 n3 n4 d... RS: Code128, HRI under bar, mode 2, 0xA0 dots, "MVP"
    CommandCode(
        "printBarcode",
        b"\x1b\x62\x06\x02\x02\xa0\x4d\x56\x50\x1e",
        "print 'MVP' as Code128",
    ),

    # ESC SYN 1 n: presenter auto-recovery after n/2 seconds (0x40 -> 32s)
    CommandCode("armRecovery", b"\x1b\x16\x31\x40", "arm presenter auto-recovery (32s)"),
    CommandCode("executeRecovery", b"\x1b\x16\x30\x00", "presenter recovery, direct execution"),

    # ESC RS a n: status transmission conditions (ASB)
    CommandCode("enableStatusReporting", b"\x1b\x1e\x61\x04", "enable automatic status block"),
)

COMMANDS: Mapping[str, CommandCode] = MappingProxyType({c.name: c for c in _CATALOG})


def lookup(name: str) -> CommandCode:
    """
    Return the command registered under ``name``.

    Raises:
        KeyError: If ``name`` is not a catalog entry
    """
    return COMMANDS[name]


def names() -> Tuple[str, ...]:
    """All catalog names in definition order."""
    return tuple(c.name for c in _CATALOG)
