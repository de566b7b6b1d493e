"""Password hashing, signed bearer tokens and role-gating dependencies."""

import hashlib
from dataclasses import dataclass

from fastapi import Header, HTTPException, Request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext

TOKEN_SALT = "keygate-auth"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def password_fingerprint(password_hash: str) -> str:
    """Short digest of the stored hash; changes whenever the password does."""
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, decoded from a bearer token."""
    user_id: str
    username: str
    role: str
    fingerprint: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _get_serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def create_token(
    secret_key: str,
    user_id: str,
    username: str,
    role: str,
    fingerprint: str = "",
) -> str:
    """Sign a principal payload and return the token string."""
    s = _get_serializer(secret_key)
    return s.dumps({
        "sub": user_id, "username": username, "role": role, "pwd": fingerprint,
    })


def verify_token(secret_key: str, token: str, max_age: int) -> Principal | None:
    """Verify and decode a token. Returns the principal or None."""
    s = _get_serializer(secret_key)
    try:
        payload = s.loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    try:
        return Principal(
            user_id=payload["sub"],
            username=payload["username"],
            role=payload["role"],
            fingerprint=payload.get("pwd", ""),
        )
    except (KeyError, TypeError, AttributeError):
        return None


async def require_user(
    request: Request,
    authorization: str | None = Header(None),
) -> Principal:
    """FastAPI dependency that resolves the caller from ``Authorization: Bearer``.

    The signature alone is not enough: the account must still exist and the
    token must have been issued against its current password.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    services = request.app.state.services
    principal = verify_token(
        services.settings.secret_key,
        authorization[7:].strip(),
        services.settings.token_ttl,
    )
    if principal is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    async with services.db.get_session() as session:
        current = await services.users.resolve_principal(session, principal)
    if current is None:
        raise HTTPException(status_code=401, detail="Token has been revoked")
    return current


async def require_admin(
    request: Request,
    authorization: str | None = Header(None),
) -> Principal:
    """FastAPI dependency restricting a route to the admin role."""
    principal = await require_user(request, authorization)
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Admin role required")
    return principal
