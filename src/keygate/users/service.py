"""User service — accounts, login and tokens."""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from keygate.common.config import KeygateSettings
from keygate.common.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    UserNotFoundError,
    ValidationError,
)
from keygate.common.logging import get_logger
from keygate.common.models import utcnow
from keygate.common.security import (
    Principal,
    create_token,
    hash_password,
    password_fingerprint,
    verify_password,
)
from keygate.audit.schemas import LoginEvent
from keygate.audit.service import AuditService
from keygate.users.models import UserModel
from keygate.users.schemas import UserRole

logger = get_logger("users")

USERNAME_MIN = 3
USERNAME_MAX = 30
PASSWORD_MIN = 6


def principal_for(user: UserModel) -> Principal:
    return Principal(
        user_id=user.id,
        username=user.username,
        role=user.role,
        fingerprint=password_fingerprint(user.password_hash),
    )


class UserService:
    """Dashboard account operations."""

    def __init__(self, settings: KeygateSettings, audit_service: AuditService):
        self.settings = settings
        self.audit_service = audit_service

    # ── Accounts ──

    async def create_user(
        self,
        session: AsyncSession,
        username: str,
        password: str,
        role: UserRole | str = UserRole.STAFF,
    ) -> UserModel:
        username = (username or "").strip()
        if not USERNAME_MIN <= len(username) <= USERNAME_MAX:
            raise ValidationError(
                f"Username must be {USERNAME_MIN}-{USERNAME_MAX} characters"
            )
        if len(password or "") < PASSWORD_MIN:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN} characters")
        try:
            role = UserRole(role)
        except ValueError:
            raise ValidationError(f"Unknown role {role!r}") from None
        if await self.get_by_username(session, username) is not None:
            raise DuplicateUserError(f"Username '{username}' already exists")

        user = UserModel(
            username=username,
            password_hash=hash_password(password),
            role=role.value,
        )
        session.add(user)
        await session.flush()
        logger.info("user created", extra={"context": {"username": username, "role": role.value}})
        return user

    async def ensure_default_users(self, session: AsyncSession) -> list[UserModel]:
        """Seed the admin and staff accounts when the user table is empty."""
        result = await session.execute(select(func.count()).select_from(UserModel))
        if result.scalar_one() > 0:
            return []
        s = self.settings
        return [
            await self.create_user(
                session, s.default_admin_username, s.default_admin_password, UserRole.ADMIN,
            ),
            await self.create_user(
                session, s.default_staff_username, s.default_staff_password, UserRole.STAFF,
            ),
        ]

    async def get(self, session: AsyncSession, user_id: str) -> UserModel:
        user = await session.get(UserModel, user_id)
        if user is None:
            raise UserNotFoundError(f"User '{user_id}' not found")
        return user

    async def get_by_username(
        self, session: AsyncSession, username: str,
    ) -> UserModel | None:
        result = await session.execute(
            select(UserModel).where(UserModel.username == username)
        )
        return result.scalar_one_or_none()

    async def list_users(self, session: AsyncSession) -> list[UserModel]:
        result = await session.execute(
            select(UserModel).order_by(UserModel.created_at.asc(), UserModel.username.asc())
        )
        return list(result.scalars().all())

    async def reset_password(
        self, session: AsyncSession, user_id: str, new_password: str,
    ) -> UserModel:
        if len(new_password or "") < PASSWORD_MIN:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN} characters")
        user = await self.get(session, user_id)
        user.password_hash = hash_password(new_password)
        await session.flush()
        logger.info("password reset", extra={"context": {"username": user.username}})
        return user

    async def delete_user(
        self, session: AsyncSession, user_id: str, actor: Principal,
    ) -> None:
        if user_id == actor.user_id:
            raise ValidationError("You cannot delete your own account")
        user = await self.get(session, user_id)
        await session.delete(user)
        await session.flush()
        logger.info("user deleted", extra={"context": {"username": user.username}})

    # ── Auth ──

    async def authenticate(
        self,
        session: AsyncSession,
        username: str,
        password: str,
        now: datetime | None = None,
    ) -> UserModel:
        """Check credentials, stamp last_login and record a login entry."""
        user = await self.get_by_username(session, (username or "").strip())
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("login failed", extra={"context": {"username": username}})
            raise InvalidCredentialsError()

        now = now or utcnow()
        user.last_login = now
        await session.flush()
        await self.audit_service.append(
            session, LoginEvent(), actor=principal_for(user), now=now,
        )
        return user

    def issue_token(self, user: UserModel) -> str:
        return create_token(
            self.settings.secret_key,
            user.id,
            user.username,
            user.role,
            fingerprint=password_fingerprint(user.password_hash),
        )

    async def resolve_principal(
        self, session: AsyncSession, principal: Principal,
    ) -> Principal | None:
        """Current principal for a decoded token, or None once it is revoked.

        Deleting the account or changing its password revokes every token
        issued before.
        """
        user = await session.get(UserModel, principal.user_id)
        if user is None:
            return None
        current = principal_for(user)
        if current.fingerprint != principal.fingerprint:
            return None
        return current
