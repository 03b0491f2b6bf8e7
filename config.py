"""
Configuration for the TUP900 printer agent.

Values come from the environment (the edge runtime injects IOTEDGE_* and any
container create options); a local .env file is honoured for development.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env early so environment variables are available for the Config class
load_dotenv(override=False)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_float(name: str, default: str) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.environ.get(name, default))


class Config:
    """Default configuration for the agent."""

    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "0") == "1"
    TESTING = False

    # ==========================================================================
    # Identity (provided by the edge runtime, opaque)
    # ==========================================================================
    DEVICE_ID = os.environ.get("IOTEDGE_DEVICEID", "")
    MODULE_ID = os.environ.get("IOTEDGE_MODULEID", "")

    # ==========================================================================
    # Printer
    # ==========================================================================
    # Default device path; the printerPath desired property overrides it at
    # runtime and an empty printerPath falls back to this value.
    PRINTER_PATH = os.environ.get("PRINTER_PATH", "/dev/usb/lp1")

    # Seconds to wait for the Automatic Status Block after requesting it
    STATUS_READ_TIMEOUT = _env_float("STATUS_READ_TIMEOUT", "2.0")

    # Bytes requested from the printer for the ASB
    STATUS_RESPONSE_SIZE = _env_int("STATUS_RESPONSE_SIZE", "10")

    # Seconds a write waits for the device to accept more bytes
    DEVICE_WRITE_TIMEOUT = _env_float("DEVICE_WRITE_TIMEOUT", "10.0")

    # Seconds a method call waits for its queued device operation
    OPERATION_TIMEOUT = _env_float("OPERATION_TIMEOUT", "30.0")

    # replace | transliterate | strict (see modules.job_encoder)
    NAME_ENCODING_POLICY = os.environ.get("NAME_ENCODING_POLICY", "replace")

    # ==========================================================================
    # Events
    # ==========================================================================
    EVENT_OUTPUT_NAME = os.environ.get("EVENT_OUTPUT_NAME", "output1")
    EVENT_OUTBOX_SIZE = _env_int("EVENT_OUTBOX_SIZE", "100")

    # ==========================================================================
    # Edge hub
    # ==========================================================================
    # On by default when the edge runtime injected its workload URI
    EDGE_HUB_ENABLED = os.environ.get(
        "EDGE_HUB_ENABLED", "1" if os.environ.get("IOTEDGE_WORKLOADURI") else "0"
    ) == "1"

    # ==========================================================================
    # Logging
    # ==========================================================================
    LOG_DIR = os.environ.get("LOG_DIR", str(BASE_DIR / "logs"))


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    DEVICE_ID = "test-device"
    MODULE_ID = "test-module"
    STATUS_READ_TIMEOUT = 0.2
    OPERATION_TIMEOUT = 5.0
    EDGE_HUB_ENABLED = False
