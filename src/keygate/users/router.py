"""Auth and user management API router."""

from fastapi import APIRouter, Depends

from keygate.common.schemas import SuccessResponse
from keygate.common.security import Principal, require_admin
from keygate.deps import Services, get_services
from keygate.users.schemas import (
    LoginRequest,
    LoginResponse,
    PasswordReset,
    UserCreate,
    UserResponse,
)

router = APIRouter()


# ── Auth ──

@router.post("/auth/login", response_model=LoginResponse)
async def login(body: LoginRequest, services: Services = Depends(get_services)):
    async with services.db.get_session() as session:
        user = await services.users.authenticate(session, body.username, body.password)
        return LoginResponse(
            user=UserResponse.from_model(user),
            token=services.users.issue_token(user),
        )


# ── Users (admin only) ──

@router.get("/users", response_model=list[UserResponse])
async def list_users(
    services: Services = Depends(get_services),
    _: Principal = Depends(require_admin),
):
    async with services.db.get_session() as session:
        users = await services.users.list_users(session)
        return [UserResponse.from_model(u) for u in users]


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate,
    services: Services = Depends(get_services),
    _: Principal = Depends(require_admin),
):
    async with services.db.get_session() as session:
        user = await services.users.create_user(
            session, body.username, body.password, body.role,
        )
        return UserResponse.from_model(user)


@router.put("/users/{user_id}/password", response_model=SuccessResponse)
async def reset_password(
    user_id: str,
    body: PasswordReset,
    services: Services = Depends(get_services),
    _: Principal = Depends(require_admin),
):
    async with services.db.get_session() as session:
        user = await services.users.reset_password(session, user_id, body.new_password)
        return SuccessResponse(message=f"Password for {user.username} has been reset")


@router.delete("/users/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    services: Services = Depends(get_services),
    principal: Principal = Depends(require_admin),
):
    async with services.db.get_session() as session:
        await services.users.delete_user(session, user_id, actor=principal)
        return SuccessResponse(message="User deleted successfully")
