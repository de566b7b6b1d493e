"""SQLAlchemy models for the audit log."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from keygate.common.models import Base, utcnow


class LogModel(Base):
    __tablename__ = "logs"

    # Monotonic id doubles as the insertion-order tie-breaker for equal timestamps.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, default="system")
    device_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    mac: Mapped[str | None] = mapped_column(String(64), nullable=True)
    hostname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    @property
    def device_details(self) -> str | None:
        if self.mac and self.hostname:
            return f"{self.hostname} ({self.mac})"
        return None
