"""Audit service — append to and query the action log."""

from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from keygate.common.config import KeygateSettings
from keygate.common.logging import get_logger
from keygate.common.models import utcnow
from keygate.common.security import Principal
from keygate.audit.models import LogModel
from keygate.audit.schemas import LoginEvent, LogEvent

logger = get_logger("audit")


class AuditService:
    """Append-only action log. There is deliberately no update or delete path."""

    def __init__(self, settings: KeygateSettings):
        self.settings = settings

    # ── Write ──

    async def append(
        self,
        session: AsyncSession,
        event: LogEvent,
        actor: Principal | None = None,
        now: datetime | None = None,
    ) -> LogModel:
        """Add one entry inside the caller's transaction."""
        entry = LogModel(
            action=event.action,
            user_id=actor.user_id if actor else None,
            username=actor.username if actor else "system",
            timestamp=now or utcnow(),
        )
        if not isinstance(event, LoginEvent):
            entry.device_id = event.device_id
            entry.mac = event.mac_address
            entry.hostname = event.hostname
        session.add(entry)
        await session.flush()
        logger.debug("audit %s by %s", entry.action, entry.username)
        return entry

    # ── Read ──

    async def list_entries(
        self,
        session: AsyncSession,
        limit: int | None = None,
        action: str | None = None,
        search: str | None = None,
    ) -> list[LogModel]:
        """Newest first; equal timestamps fall back to insertion order."""
        if limit is None:
            limit = self.settings.default_log_limit
        query = select(LogModel)
        if action:
            query = query.where(LogModel.action == action)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    LogModel.username.ilike(pattern),
                    LogModel.hostname.ilike(pattern),
                    LogModel.mac.ilike(pattern),
                    LogModel.action.ilike(pattern),
                )
            )
        query = (
            query.order_by(LogModel.timestamp.desc(), LogModel.id.desc())
            .limit(limit)
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    async def list_for_device(
        self, session: AsyncSession, device_id: str,
    ) -> list[LogModel]:
        result = await session.execute(
            select(LogModel)
            .where(LogModel.device_id == device_id)
            .order_by(LogModel.timestamp.desc(), LogModel.id.desc())
        )
        return list(result.scalars().all())

    async def count(self, session: AsyncSession) -> int:
        result = await session.execute(select(func.count()).select_from(LogModel))
        return result.scalar_one()
