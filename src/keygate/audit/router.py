"""Audit log API router."""

from fastapi import APIRouter, Depends, Query

from keygate.common.exceptions import ValidationError
from keygate.common.schemas import SuccessResponse
from keygate.common.security import Principal, require_user
from keygate.deps import Services, get_services
from keygate.audit.schemas import LogAction, LogEntryCreate, LogEntryResponse

router = APIRouter()


@router.get("/logs", response_model=list[LogEntryResponse])
async def list_logs(
    limit: int | None = Query(None, ge=1),
    action: LogAction | None = Query(None),
    search: str | None = Query(None, max_length=255),
    services: Services = Depends(get_services),
    _: Principal = Depends(require_user),
):
    if limit is not None and limit > services.settings.max_log_limit:
        raise ValidationError(f"limit must be <= {services.settings.max_log_limit}")
    async with services.db.get_session() as session:
        entries = await services.audit.list_entries(
            session, limit=limit, action=action, search=search,
        )
        return [LogEntryResponse.from_model(e) for e in entries]


@router.post("/logs", response_model=SuccessResponse, status_code=201)
async def add_log_entry(
    body: LogEntryCreate,
    services: Services = Depends(get_services),
    principal: Principal = Depends(require_user),
):
    async with services.db.get_session() as session:
        await services.audit.append(session, body.root, actor=principal)
        return SuccessResponse(message="Log entry added successfully")
