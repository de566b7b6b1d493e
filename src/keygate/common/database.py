"""Async database manager for Keygate."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from keygate.common.config import KeygateSettings, get_settings
from keygate.common.exceptions import BackendUnavailableError
from keygate.common.logging import get_logger
from keygate.common.models import Base

# Import all model modules so Base.metadata is complete for create_all().
import keygate.users.models  # noqa: F401
import keygate.devices.models  # noqa: F401
import keygate.audit.models  # noqa: F401

logger = get_logger("database")


class DatabaseManager:
    """Owns the async engine and hands out transactional sessions."""

    def __init__(self, settings: KeygateSettings | None = None):
        self._settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def init(self) -> None:
        url = self._settings.db_url
        parsed = make_url(url)
        if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_async_engine(url, echo=False)
        self._session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """One session = one transaction: commit on success, rollback on error."""
        if self._session_factory is None:
            raise RuntimeError("DatabaseManager not initialized — call init() first")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except (OperationalError, InterfaceError) as exc:
                await session.rollback()
                logger.error("database unavailable: %s", exc)
                raise BackendUnavailableError() from exc
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized — call init() first")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self._session_factory = None
