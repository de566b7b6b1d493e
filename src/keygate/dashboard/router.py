"""Dashboard and settings API router."""

from fastapi import APIRouter, Depends

from keygate.common.security import Principal, require_admin, require_user
from keygate.deps import Services, get_services
from keygate.dashboard.schemas import DashboardStatsResponse, SettingsResponse

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStatsResponse)
async def dashboard(
    services: Services = Depends(get_services),
    _: Principal = Depends(require_user),
):
    async with services.db.get_session() as session:
        stats = await services.stats.compute_stats(session)
        return DashboardStatsResponse.from_stats(stats)


@router.get("/settings", response_model=SettingsResponse)
async def settings(
    services: Services = Depends(get_services),
    _: Principal = Depends(require_admin),
):
    s = services.settings
    return SettingsResponse(
        api_title=s.api_title,
        api_version=s.api_version,
        environment=s.environment,
        db_backend=s.db_backend,
        token_ttl=s.token_ttl,
        cors_origins=s.cors_origins,
        default_log_limit=s.default_log_limit,
        max_log_limit=s.max_log_limit,
    )
