"""Pydantic schemas for the dashboard and settings endpoints."""

from keygate.common.schemas import CamelModel
from keygate.audit.schemas import LogEntryResponse
from keygate.dashboard.service import DashboardStats


class DashboardStatsResponse(CamelModel):
    total_devices: int
    active_devices: int
    expired_devices: int
    pending_devices: int
    recent_activity: list[LogEntryResponse]

    @classmethod
    def from_stats(cls, stats: DashboardStats) -> "DashboardStatsResponse":
        return cls(
            total_devices=stats.total_devices,
            active_devices=stats.active_devices,
            expired_devices=stats.expired_devices,
            pending_devices=stats.pending_devices,
            recent_activity=[LogEntryResponse.from_model(e) for e in stats.recent_activity],
        )


class SettingsResponse(CamelModel):
    api_title: str
    api_version: str
    environment: str
    db_backend: str
    token_ttl: int
    cors_origins: list[str]
    default_log_limit: int
    max_log_limit: int
