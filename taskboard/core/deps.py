"""
FastAPI Dependencies
Authentication, database, and board permission dependencies
"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from taskboard.core.board_roles import BoardRole, has_permission, insufficient_role_message
from taskboard.core.database import get_db
from taskboard.core.references import parse_id
from taskboard.core.security import verify_token
from taskboard.models.user import User
from taskboard.repositories.base import LookupFailedError
from taskboard.repositories.user import user_repository
from taskboard.schemas.access import AccessReason, BoardAccess
from taskboard.services.board_access import board_access_service

logger = structlog.get_logger()

# Security schemes
security = HTTPBearer(auto_error=False)

# Path parameters that identify the board, most specific first
ENTRY_POINT_PARAMS = ("card_id", "list_id", "board_id")


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> User:
    """
    Get current authenticated user from JWT token

    Raises:
        HTTPException: If authentication fails
    """
    if not credentials:
        logger.warning("Missing authentication credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    subject = verify_token(credentials.credentials, token_type="access")
    user_id = parse_id(subject)
    if user_id is None:
        logger.warning("Token subject is not a user id", subject=subject)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = await user_repository.get_active(db, user_id)
    except LookupFailedError as e:
        logger.error("Database error during authentication", error=str(e), user_id=str(user_id))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service error"
        )

    if not user:
        logger.warning("User not found or inactive", user_id=str(user_id))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug("User authenticated successfully", user_id=str(user_id))
    return user


async def get_current_superuser(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current superuser (admin access required)

    Raises:
        HTTPException: If user is not a superuser
    """
    if not current_user.is_superuser:
        logger.warning("Non-superuser attempted admin access", user_id=str(current_user.id))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )

    return current_user


def status_for_reason(reason: Optional[AccessReason]) -> int:
    """HTTP status for a denied access decision"""
    if reason == AccessReason.INVALID_ID:
        return status.HTTP_400_BAD_REQUEST
    if reason is not None and reason.is_not_found:
        return status.HTTP_404_NOT_FOUND
    if reason == AccessReason.LOOKUP_FAILED:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_403_FORBIDDEN


async def resolve_entry_point(db: AsyncSession, path_params: dict, user_id) -> BoardAccess:
    """Resolve access through the most specific id present in the path"""
    if "card_id" in path_params:
        return await board_access_service.resolve_via_card(db, path_params["card_id"], user_id)
    if "list_id" in path_params:
        return await board_access_service.resolve_via_list(db, path_params["list_id"], user_id)
    if "board_id" in path_params:
        return await board_access_service.resolve_via_board(db, path_params["board_id"], user_id)

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="A board, list or card id is required"
    )


def require_board_permission(required_role: BoardRole):
    """
    Dependency factory for board-scoped routes

    Args:
        required_role: Minimum board role the caller must hold

    Returns:
        Dependency returning the caller's BoardAccess
    """
    required_role = BoardRole(required_role)

    async def board_permission_checker(
        request: Request,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ) -> BoardAccess:
        access = await resolve_entry_point(db, request.path_params, current_user.id)

        if not access.has_access:
            logger.warning(
                "Board access refused",
                user_id=str(current_user.id),
                path=request.url.path,
                reason=access.reason.value if access.reason else None,
            )
            raise HTTPException(
                status_code=status_for_reason(access.reason),
                detail=access.reason.value if access.reason else AccessReason.ACCESS_DENIED.value,
            )

        if not has_permission(access.role, required_role):
            logger.warning(
                "Insufficient board role",
                user_id=str(current_user.id),
                board_id=str(access.board.id) if access.board else None,
                current_role=access.role.value,
                required_role=required_role.value,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "message": insufficient_role_message(access.role),
                    "current_role": access.role.value,
                    "required_role": required_role.value,
                },
            )

        logger.debug(
            "Board permission check passed",
            user_id=str(current_user.id),
            role=access.role.value,
            required_role=required_role.value,
        )
        return access

    return board_permission_checker
