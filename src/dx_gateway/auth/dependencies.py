"""FastAPI dependency: get_current_user.

Usage in any protected router:
    from src.dx_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

import uuid
from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.database import get_db_session
from src.dx_common.errors import AccountDisabledError, InvalidCredentialsError
from src.dx_gateway.auth.jwt_handler import decode_token
from src.dx_gateway.user.db_models import UserModel
from src.dx_moderation.domain.admin_policy import AdminPolicy

# tokenUrl points at the external auth service's login endpoint (Swagger "Authorize")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Extract and validate the JWT Bearer token, return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an
    unknown user. Raises AccountDisabledError (403) for disabled accounts.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


def admin_dependency(policy: AdminPolicy) -> Callable[..., Awaitable[UserModel]]:
    """Build a dependency that only lets allowlisted admins through.

    Usage:
        require_admin = admin_dependency(AdminPolicy.from_csv(settings.ADMIN_EMAILS))

        @router.post("/admin-only")
        async def handler(admin: UserModel = Depends(require_admin)): ...
    """

    async def require_admin(
        current_user: UserModel = Depends(get_current_user),
    ) -> UserModel:
        policy.ensure_admin(current_user.email)
        return current_user

    return require_admin
