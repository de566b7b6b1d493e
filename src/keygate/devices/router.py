"""Device API router."""

from fastapi import APIRouter, Depends, Query

from keygate.common.models import utcnow
from keygate.common.schemas import SuccessResponse
from keygate.common.security import Principal, require_user
from keygate.deps import Services, get_services
from keygate.devices.schemas import DeviceCreate, DeviceEnvelope, DeviceResponse
from keygate.devices.status import DeviceStatus

router = APIRouter()


@router.get("/devices", response_model=list[DeviceResponse])
async def list_devices(
    status: DeviceStatus | None = Query(None),
    search: str | None = Query(None, max_length=255),
    services: Services = Depends(get_services),
    _: Principal = Depends(require_user),
):
    now = utcnow()
    async with services.db.get_session() as session:
        devices = await services.devices.list_devices(
            session, status=status, search=search, now=now,
        )
        return [DeviceResponse.from_model(d, now) for d in devices]


@router.post("/devices", response_model=DeviceEnvelope, status_code=201)
async def create_device(
    body: DeviceCreate,
    services: Services = Depends(get_services),
    principal: Principal = Depends(require_user),
):
    now = utcnow()
    async with services.db.get_session() as session:
        if body.duration is None:
            device = await services.devices.create(
                session, body.mac_address, body.hostname, actor=principal, now=now,
            )
        else:
            device = await services.devices.issue_key(
                session, body.mac_address, body.hostname, body.duration,
                actor=principal, now=now,
            )
        return DeviceEnvelope(device=DeviceResponse.from_model(device, now))


@router.get("/devices/{device_id}", response_model=DeviceResponse)
async def get_device(
    device_id: str,
    services: Services = Depends(get_services),
    _: Principal = Depends(require_user),
):
    async with services.db.get_session() as session:
        device = await services.devices.get(session, device_id)
        return DeviceResponse.from_model(device, utcnow())


@router.put("/devices/{device_id}/reset", response_model=SuccessResponse)
async def reset_device(
    device_id: str,
    services: Services = Depends(get_services),
    principal: Principal = Depends(require_user),
):
    async with services.db.get_session() as session:
        device = await services.devices.reset(session, device_id, actor=principal)
        return SuccessResponse(
            message=f"{device.hostname} has been reset to pending status",
        )


@router.delete("/devices/{device_id}", response_model=SuccessResponse)
async def delete_device(
    device_id: str,
    services: Services = Depends(get_services),
    principal: Principal = Depends(require_user),
):
    async with services.db.get_session() as session:
        await services.devices.delete(session, device_id, actor=principal)
        return SuccessResponse(message="Device deleted successfully")
