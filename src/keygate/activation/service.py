"""Activation service — end devices presenting their license key."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from keygate.common.config import KeygateSettings
from keygate.common.exceptions import ValidationError
from keygate.common.logging import get_logger
from keygate.common.models import utcnow
from keygate.devices.service import DeviceService, normalize_mac
from keygate.devices.status import DeviceStatus, device_status

logger = get_logger("activation")


class ActivationService:
    """Key checks for client software. Read-mostly: only the hostname is refreshed."""

    def __init__(self, settings: KeygateSettings, devices: DeviceService):
        self.settings = settings
        self.devices = devices

    async def activate(
        self,
        session: AsyncSession,
        mac: str,
        hostname: str,
        key: str,
        now: datetime | None = None,
    ) -> dict:
        """Accept ``key`` when it belongs to this MAC and is currently active."""
        if not (mac or "").strip():
            raise ValidationError("macAddress is required")
        if not (key or "").strip():
            raise ValidationError("Activation key is required")

        device = await self.devices.find_by_key(session, key)
        if device is None:
            return {
                "success": False,
                "code": "INVALID_KEY",
                "message": "The activation key is invalid",
            }
        if device.mac != normalize_mac(mac):
            logger.warning(
                "key presented by another device",
                extra={"context": {"device_id": device.id, "mac": normalize_mac(mac)}},
            )
            return {
                "success": False,
                "code": "MAC_MISMATCH",
                "message": "The activation key was issued for a different device",
            }

        now = now or utcnow()
        if device_status(device, now) != DeviceStatus.ACTIVE:
            return {
                "success": False,
                "code": "EXPIRED",
                "message": "The activation key has expired",
            }

        hostname = (hostname or "").strip()
        if hostname and hostname != device.hostname:
            device.hostname = hostname
            device.updated_at = now
            await session.flush()
        logger.info(
            "device activated",
            extra={"context": {
                "device_id": device.id, "mac": device.mac, "hostname": device.hostname,
            }},
        )
        return {
            "success": True,
            "code": "ACTIVATED",
            "message": "Activation successful",
            "device_id": device.id,
            "expiry_date": device.expires_at,
        }

    async def check(
        self, session: AsyncSession, mac: str, now: datetime | None = None,
    ) -> dict:
        device = await self.devices.find_by_mac_and_status(
            session, mac, DeviceStatus.ACTIVE, now=now,
        )
        if device is None:
            return {"active": False, "message": "Status: Not activated"}
        return {"active": True, "message": "Status: Activated"}
