"""Device service — registry lookups and the license key lifecycle.

Every mutation appends its audit entry through the same session, so the
device change and its log row commit or roll back together.
"""

from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from keygate.common.config import KeygateSettings
from keygate.common.exceptions import (
    DeviceNotFoundError,
    DuplicateDeviceError,
    ValidationError,
)
from keygate.common.logging import get_logger
from keygate.common.models import utcnow
from keygate.common.security import Principal
from keygate.audit.schemas import DeleteEvent, IssueKeyEvent, ResetEvent
from keygate.audit.service import AuditService
from keygate.devices.models import DeviceModel
from keygate.devices.status import DeviceStatus, device_status
from keygate.keygen.durations import KeyDuration, compute_expiry, parse_duration
from keygate.keygen.generator import generate_key, normalize_key

logger = get_logger("devices")


def normalize_mac(mac: str) -> str:
    """Canonical device identity: trimmed, uppercase, colon separated."""
    return (mac or "").strip().upper().replace("-", ":")


def _require(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


class DeviceService:
    """Device registry plus key issuance, reset and deletion."""

    def __init__(self, settings: KeygateSettings, audit_service: AuditService):
        self.settings = settings
        self.audit_service = audit_service

    # ── Registry ──

    async def create(
        self,
        session: AsyncSession,
        mac: str,
        hostname: str,
        actor: Principal | None = None,
        now: datetime | None = None,
    ) -> DeviceModel:
        """Register a device in the pending state (no key)."""
        mac = normalize_mac(_require(mac, "macAddress"))
        hostname = _require(hostname, "hostname")
        if await self.find_by_mac(session, mac) is not None:
            raise DuplicateDeviceError(f"Device {mac} is already registered")

        now = now or utcnow()
        result = await session.execute(select(func.coalesce(func.max(DeviceModel.seq), 0)))
        device = DeviceModel(
            seq=result.scalar_one() + 1,
            mac=mac,
            hostname=hostname,
            key_code=None,
            active=False,
            added_by=actor.user_id if actor else None,
            created_at=now,
            updated_at=now,
        )
        session.add(device)
        await session.flush()
        logger.info("device registered", extra={"context": {"device_id": device.id, "mac": mac}})
        return device

    async def get(self, session: AsyncSession, device_id: str) -> DeviceModel:
        device = await session.get(DeviceModel, device_id)
        if device is None:
            raise DeviceNotFoundError(f"Device '{device_id}' not found")
        return device

    async def list_devices(
        self,
        session: AsyncSession,
        status: DeviceStatus | str | None = None,
        search: str | None = None,
        now: datetime | None = None,
    ) -> list[DeviceModel]:
        """All devices in registration order, optionally filtered.

        ``status`` is derived, so that filter runs after the query.
        """
        query = select(DeviceModel)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    DeviceModel.mac.ilike(pattern),
                    DeviceModel.hostname.ilike(pattern),
                    DeviceModel.key_code.ilike(pattern),
                )
            )
        query = query.order_by(DeviceModel.seq.asc())
        result = await session.execute(query)
        devices = list(result.scalars().all())

        if status:
            wanted = DeviceStatus(status)
            now = now or utcnow()
            devices = [d for d in devices if device_status(d, now) == wanted]
        return devices

    async def find_by_key(self, session: AsyncSession, key: str) -> DeviceModel | None:
        key = normalize_key(key or "")
        if not key:
            return None
        result = await session.execute(
            select(DeviceModel).where(DeviceModel.key_code == key)
        )
        return result.scalar_one_or_none()

    async def find_by_mac(self, session: AsyncSession, mac: str) -> DeviceModel | None:
        result = await session.execute(
            select(DeviceModel).where(DeviceModel.mac == normalize_mac(mac))
        )
        return result.scalar_one_or_none()

    async def find_by_mac_and_status(
        self,
        session: AsyncSession,
        mac: str,
        status: DeviceStatus | str,
        now: datetime | None = None,
    ) -> DeviceModel | None:
        device = await self.find_by_mac(session, mac)
        if device is None:
            return None
        if device_status(device, now or utcnow()) != DeviceStatus(status):
            return None
        return device

    # ── Lifecycle ──

    async def issue_key(
        self,
        session: AsyncSession,
        mac: str,
        hostname: str,
        duration: KeyDuration | str,
        actor: Principal | None = None,
        now: datetime | None = None,
    ) -> DeviceModel:
        """Issue a fresh key, creating the device if the MAC is unknown.

        A pending device receives the key in place. A device that already
        holds a key is rejected; it has to be reset first.
        """
        mac = normalize_mac(_require(mac, "macAddress"))
        hostname = _require(hostname, "hostname")
        duration = parse_duration(duration)
        now = now or utcnow()

        device = await self.find_by_mac(session, mac)
        if device is None:
            device = await self.create(session, mac, hostname, actor=actor, now=now)
        elif device.key_code:
            raise DuplicateDeviceError(
                f"Device {mac} already holds a license key; reset it first"
            )

        device.hostname = hostname
        device.key_code = generate_key()
        device.active = True
        device.activated_at = now
        device.expires_at = compute_expiry(now, duration)
        device.updated_at = now
        await session.flush()

        await self.audit_service.append(
            session,
            IssueKeyEvent(device_id=device.id, mac_address=device.mac, hostname=device.hostname),
            actor=actor,
            now=now,
        )
        logger.info(
            "license key issued",
            extra={"context": {
                "device_id": device.id, "mac": mac, "duration": duration.value,
            }},
        )
        return device

    async def reset(
        self,
        session: AsyncSession,
        device_id: str,
        actor: Principal | None = None,
        now: datetime | None = None,
    ) -> DeviceModel:
        """Return a device to pending: key, active flag and expiry are cleared."""
        device = await self.get(session, device_id)
        now = now or utcnow()
        device.key_code = None
        device.active = False
        device.activated_at = None
        device.expires_at = None
        device.updated_at = now
        await session.flush()

        await self.audit_service.append(
            session,
            ResetEvent(device_id=device.id, mac_address=device.mac, hostname=device.hostname),
            actor=actor,
            now=now,
        )
        logger.info("device reset", extra={"context": {"device_id": device.id}})
        return device

    async def delete(
        self,
        session: AsyncSession,
        device_id: str,
        actor: Principal | None = None,
        now: datetime | None = None,
    ) -> None:
        """Remove a device. Its log history is kept."""
        device = await self.get(session, device_id)
        event = DeleteEvent(
            device_id=device.id, mac_address=device.mac, hostname=device.hostname,
        )
        await session.delete(device)
        await session.flush()

        await self.audit_service.append(session, event, actor=actor, now=now)
        logger.info("device deleted", extra={"context": {"device_id": device_id}})
