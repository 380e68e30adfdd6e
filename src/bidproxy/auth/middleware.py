"""
Authentication dependency for bearer JWT validation.

This module exposes:
- get_current_user (resolves the token to an authorized CurrentUser)
- CurrentUserDep (FastAPI dependency alias)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bidproxy.auth.jwt import JWTService
from bidproxy.auth.models import UserRole
from bidproxy.auth.repository import UserRepository
from bidproxy.auth.schemas import CurrentUser
from bidproxy.config import Settings, get_settings
from bidproxy.shared.database import get_db_session
from bidproxy.shared.exceptions import InvalidTokenError, TokenExpiredError
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Resolve the bearer token to the caller's account.

    The role and active flag always come from the users table, never from
    token claims. Unknown subjects are registered as customers.
    """
    if credentials is None:
        logger.warning(
            "Missing authentication credentials",
            extra={
                "endpoint": str(request.url.path),
                "method": request.method,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        raise _unauthorized("MISSING_CREDENTIALS", "Authentication credentials required")

    try:
        payload = JWTService(settings).verify_access_token(credentials.credentials)
    except TokenExpiredError:
        logger.info(
            "Token expired",
            extra={"endpoint": str(request.url.path), "method": request.method},
        )
        raise _unauthorized("TOKEN_EXPIRED", "Token has expired")
    except InvalidTokenError as e:
        logger.warning(
            "Invalid token",
            extra={
                "endpoint": str(request.url.path),
                "method": request.method,
                "error": e.message,
            },
        )
        raise _unauthorized(e.code, e.message)

    repo = UserRepository(session)
    user = await repo.get_or_create_from_claims(
        user_id=payload.sub,
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        profile_image_url=payload.profile_image_url,
    )

    if not user.is_active:
        logger.warning(
            "Deactivated account rejected",
            extra={"user_id": user.id, "endpoint": str(request.url.path)},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "ACCOUNT_DEACTIVATED", "message": "Account is deactivated"},
        )

    return CurrentUser(
        id=user.id,
        email=user.email,
        role=UserRole(user.role),
        is_active=user.is_active,
    )


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
