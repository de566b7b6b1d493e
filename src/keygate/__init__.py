"""Keygate: device license key administration service."""

from keygate.devices.status import DeviceStatus, derive_status, device_status
from keygate.keygen.durations import KeyDuration, compute_expiry
from keygate.keygen.generator import generate_key, validate_format

__all__ = [
    "DeviceStatus",
    "derive_status",
    "device_status",
    "KeyDuration",
    "compute_expiry",
    "generate_key",
    "validate_format",
]
__version__ = "0.1.0"
