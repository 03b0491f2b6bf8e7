"""
Printer configuration models.

PrinterConfig is a frozen snapshot of everything a device operation needs
(currently the device path). PrinterConfigStore holds the current snapshot
and replaces it wholesale when a desired-property update arrives.

Thread Safety:
    - Method handlers call snapshot() ONCE at entry and pass the snapshot
      down; they never read the store again mid-operation
    - apply_device_path() swaps the reference under a lock
    - An in-flight print keeps the path it started with even if the path is
      changed while it runs
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any, Optional

from core.exceptions import ConfigurationError


DEFAULT_PRINTER_PATH = "/dev/usb/lp1"

PRINTER_PATH_PROPERTY = "printerPath"


@dataclass(frozen=True)
class PrinterConfig:
    """Immutable configuration snapshot for one device operation."""

    printer_path: str = DEFAULT_PRINTER_PATH


class PrinterConfigStore:
    """Single-writer, multi-reader holder of the active PrinterConfig."""

    def __init__(self, default_path: str = DEFAULT_PRINTER_PATH):
        if not default_path:
            raise ValueError("default_path must not be empty")
        self._default_path = default_path
        self._current = PrinterConfig(printer_path=default_path)
        self._lock = threading.Lock()

    @property
    def default_path(self) -> str:
        return self._default_path

    def snapshot(self) -> PrinterConfig:
        """Return the active configuration (immutable, safe to keep)."""
        with self._lock:
            return self._current

    def apply_device_path(self, new_path: Optional[Any]) -> str:
        """
        Replace the active device path.

        None or an empty/blank string resets to the default path.

        Args:
            new_path: Requested path from the desired properties

        Returns:
            The path now in effect (which is what gets reported back)

        Raises:
            ConfigurationError: If the value is not a string; nothing changes
        """
        if new_path is not None and not isinstance(new_path, str):
            raise ConfigurationError(
                PRINTER_PATH_PROPERTY, new_path, f"expected a string, got {type(new_path).__name__}"
            )

        effective = new_path.strip() if new_path else ""
        if not effective:
            effective = self._default_path

        with self._lock:
            self._current = replace(self._current, printer_path=effective)
            return self._current.printer_path
