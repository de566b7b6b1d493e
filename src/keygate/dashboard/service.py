"""Dashboard aggregation over the device registry and the audit log."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from keygate.common.config import KeygateSettings
from keygate.common.models import utcnow
from keygate.audit.models import LogModel
from keygate.audit.service import AuditService
from keygate.devices.service import DeviceService
from keygate.devices.status import DeviceStatus, device_status


@dataclass
class DashboardStats:
    total_devices: int = 0
    active_devices: int = 0
    expired_devices: int = 0
    pending_devices: int = 0
    recent_activity: list[LogModel] = field(default_factory=list)


class StatsService:
    """Counts are recomputed on every call; nothing is cached."""

    def __init__(
        self,
        settings: KeygateSettings,
        devices: DeviceService,
        audit: AuditService,
    ):
        self.settings = settings
        self.devices = devices
        self.audit = audit

    async def compute_stats(
        self, session: AsyncSession, now: datetime | None = None,
    ) -> DashboardStats:
        now = now or utcnow()
        devices = await self.devices.list_devices(session)
        counts = Counter(device_status(d, now) for d in devices)
        recent = await self.audit.list_entries(
            session, limit=self.settings.recent_activity_size,
        )
        return DashboardStats(
            total_devices=len(devices),
            active_devices=counts[DeviceStatus.ACTIVE],
            expired_devices=counts[DeviceStatus.EXPIRED],
            pending_devices=counts[DeviceStatus.PENDING],
            recent_activity=recent,
        )
