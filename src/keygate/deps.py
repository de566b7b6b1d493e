"""Service container wiring for Keygate.

Each application builds its own container; routers reach it through
``request.app.state.services`` so two apps (or two tests) never share state.
"""

from dataclasses import dataclass

from fastapi import Request

from keygate.common.config import KeygateSettings, get_settings
from keygate.common.database import DatabaseManager
from keygate.activation.service import ActivationService
from keygate.audit.service import AuditService
from keygate.dashboard.service import StatsService
from keygate.devices.service import DeviceService
from keygate.users.service import UserService


@dataclass
class Services:
    settings: KeygateSettings
    db: DatabaseManager
    audit: AuditService
    devices: DeviceService
    users: UserService
    stats: StatsService
    activation: ActivationService

    async def startup(self) -> None:
        """Open the database, create tables, seed default accounts."""
        await self.db.init()
        await self.db.create_all()
        async with self.db.get_session() as session:
            await self.users.ensure_default_users(session)

    async def shutdown(self) -> None:
        await self.db.close()


def build_services(settings: KeygateSettings | None = None) -> Services:
    settings = settings or get_settings()
    audit = AuditService(settings)
    devices = DeviceService(settings, audit_service=audit)
    return Services(
        settings=settings,
        db=DatabaseManager(settings),
        audit=audit,
        devices=devices,
        users=UserService(settings, audit_service=audit),
        stats=StatsService(settings, devices, audit),
        activation=ActivationService(settings, devices),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's service container."""
    return request.app.state.services
