"""SQLAlchemy models for the device registry."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from keygate.common.models import Base, TimestampMixin, generate_uuid, utcnow


class DeviceModel(Base, TimestampMixin):
    __tablename__ = "devices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    # Registration order; assigned by DeviceService.create.
    seq: Mapped[int] = mapped_column(Integer, unique=True, nullable=False, index=True)
    mac: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    hostname: Mapped[str] = mapped_column(String(255), nullable=False)
    key_code: Mapped[str | None] = mapped_column(
        String(64), unique=True, nullable=True, index=True
    )
    active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    activated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # Weak reference: users may be deleted without touching their devices.
    added_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
