"""Pydantic schemas for device endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from keygate.common.models import as_utc
from keygate.common.schemas import CamelModel
from keygate.devices.models import DeviceModel
from keygate.devices.status import DeviceStatus, device_status
from keygate.keygen.durations import KeyDuration


class DeviceCreate(CamelModel):
    mac_address: str = Field(..., min_length=1, max_length=64)
    hostname: str = Field(..., min_length=1, max_length=255)
    # Omitted: register the device as pending without a key.
    duration: Optional[KeyDuration] = None


class DeviceResponse(CamelModel):
    id: str
    mac_address: str
    hostname: str
    status: DeviceStatus
    key: str = ""
    expiry_date: Optional[datetime] = None
    activated_at: Optional[datetime] = None
    added_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, device: DeviceModel, now: datetime) -> "DeviceResponse":
        return cls(
            id=device.id,
            mac_address=device.mac,
            hostname=device.hostname,
            status=device_status(device, now),
            key=device.key_code or "",
            expiry_date=as_utc(device.expires_at),
            activated_at=as_utc(device.activated_at),
            added_by=device.added_by,
            created_at=as_utc(device.created_at),
            updated_at=as_utc(device.updated_at),
        )


class DeviceEnvelope(CamelModel):
    device: DeviceResponse
