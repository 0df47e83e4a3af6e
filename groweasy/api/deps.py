from typing import Annotated, Optional
import uuid
import logging

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.database import get_db
from groweasy.core.security import verify_access_token
from groweasy.models.user import User, UserRole, UserStatus
from groweasy.services.audit_service import AuditService
from groweasy.services.settings_service import SettingsService


logger = logging.getLogger(__name__)

# HTTP Bearer security scheme (missing header is handled here so it maps to 401)
security = HTTPBearer(auto_error=False)

DB = Annotated[AsyncSession, Depends(get_db)]


async def _user_from_token(db: AsyncSession, token: str) -> Optional[User]:
    user_id = verify_access_token(token)
    if user_id is None:
        logger.warning("Token verification failed - invalid or expired token")
        return None

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid user_id in token: {user_id}")
        return None

    result = await db.execute(select(User).where(User.id == user_uuid))
    return result.scalar_one_or_none()


async def get_current_user(
    db: DB,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> User:
    """
    Dependency to get the current authenticated user.
    Validates the JWT token and returns the user object.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    user = await _user_from_token(db, credentials.credentials)
    if user is None:
        raise credentials_exception

    if user.status == UserStatus.REJECTED.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated"
        )

    return user


async def get_optional_user(
    db: DB,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[User]:
    """Like get_current_user, but guests (no or bad token) get None."""
    if credentials is None:
        return None
    user = await _user_from_token(db, credentials.credentials)
    if user is None or user.status == UserStatus.REJECTED.value:
        return None
    return user


async def get_admin_user(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    if user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user


async def get_seller_user(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Approved sellers only."""
    if user.role != UserRole.SELLER.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Seller access required"
        )
    if user.status != UserStatus.APPROVED.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your seller account is pending approval. Please wait for admin approval."
        )
    return user


def require_feature(flag: str):
    """
    Dependency factory that blocks an endpoint while a platform feature is
    switched off in settings.

    Usage:
        @router.post("/affiliate-links", dependencies=[Depends(require_feature("enable_affiliate_program"))])
    """
    async def feature_dependency(db: DB):
        if not await SettingsService(db).feature_enabled(flag):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This feature is currently disabled: {flag}"
            )
        return True

    return feature_dependency


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, honouring X-Forwarded-For from the load balancer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def record_admin_action(
    db: AsyncSession,
    request: Request,
    admin: User,
    action: str,
    target: str,
    target_id=None,
    details: Optional[dict] = None,
) -> None:
    """Write an audit entry for an admin state change made through the API."""
    await AuditService(db).log(
        action=action,
        target=target,
        target_id=target_id,
        admin_id=admin.id,
        details=details,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


# Type aliases for cleaner endpoint signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
AdminUser = Annotated[User, Depends(get_admin_user)]
SellerUser = Annotated[User, Depends(get_seller_user)]
