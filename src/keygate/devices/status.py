"""Read-time device status derivation.

Status is never stored. It is recomputed from ``(active, expires_at, key)``
against a caller-supplied clock, so a list view and the dashboard counts taken
with the same ``now`` always agree.
"""

from datetime import datetime
from enum import Enum

from keygate.common.models import as_utc


class DeviceStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING = "pending"


def derive_status(
    active: bool,
    expires_at: datetime | None,
    key: str | None,
    now: datetime,
) -> DeviceStatus:
    """Rules, first match wins:

    1. no key and not active -> pending
    2. expiry set and already passed -> expired
    3. otherwise -> active
    """
    if not key and not active:
        return DeviceStatus.PENDING
    expires_at = as_utc(expires_at)
    if expires_at is not None and expires_at < as_utc(now):
        return DeviceStatus.EXPIRED
    return DeviceStatus.ACTIVE


def device_status(device, now: datetime) -> DeviceStatus:
    """Status of any object exposing ``active``, ``expires_at`` and ``key_code``."""
    return derive_status(device.active, device.expires_at, device.key_code, now)
