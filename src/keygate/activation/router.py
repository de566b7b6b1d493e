"""Client activation API router. Unauthenticated: called by end devices."""

from fastapi import APIRouter, Depends

from keygate.common.exceptions import ValidationError
from keygate.deps import Services, get_services
from keygate.activation.schemas import (
    ActivateRequest,
    ActivateResponse,
    CheckRequest,
    CheckResponse,
)

router = APIRouter()


@router.post("/client/activate", response_model=ActivateResponse)
async def activate(body: ActivateRequest, services: Services = Depends(get_services)):
    try:
        async with services.db.get_session() as session:
            result = await services.activation.activate(
                session, body.mac_address, body.hostname, body.key,
            )
            return ActivateResponse(**result)
    except ValidationError as e:
        return ActivateResponse(success=False, code=e.code, message=e.message)


@router.post("/client/check", response_model=CheckResponse)
async def check(body: CheckRequest, services: Services = Depends(get_services)):
    async with services.db.get_session() as session:
        result = await services.activation.check(session, body.mac_address)
        return CheckResponse(**result)
