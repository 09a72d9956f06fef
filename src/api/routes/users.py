"""User routes (register, update, role/status, lookup).

Endpoints:
- POST /api/users/register: Register a new user
- PUT /api/users/{user_id}: Update profile fields
- PUT /api/users/{user_id}/role-status: Change role/status (Admin only, X-User-Id header)
- GET /api/users/{user_id}: Get one user
- GET /api/users: List users
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status

from api.dependencies import get_user_service
from api.models import RegisterRequest, RoleStatusRequest, UpdateUserRequest, UserResponse
from domain.model.errors import (
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    RepositoryError,
    ValidationError,
)
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _to_http(e: Exception) -> HTTPException:
    """Map a domain or repository error to an HTTPException."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, RepositoryError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database service unavailable")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    response: Response,
    service: UserService = Depends(get_user_service),
):
    """Register a new user.

    Returns:
        Created user; Location header points at GET /api/users/{id}

    Raises:
        HTTPException: 400 if a registration rule fails
    """
    try:
        view = await service.register(request.to_domain())
    except (DomainError, RepositoryError) as e:
        raise _to_http(e)

    response.headers["Location"] = f"{router.prefix}/{view.id}"
    return UserResponse.from_view(view)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
):
    """Update a user's profile."""
    try:
        view = await service.update(user_id, request.to_domain())
    except (DomainError, RepositoryError) as e:
        raise _to_http(e)
    return UserResponse.from_view(view)


@router.put("/{user_id}/role-status", response_model=UserResponse)
async def update_role_status(
    user_id: str,
    request: RoleStatusRequest,
    performed_by: str | None = Header(None, alias="X-User-Id"),
    service: UserService = Depends(get_user_service),
):
    """Change a user's role and/or status.

    The performer is identified by the X-User-Id header; the service decides
    whether that user is an administrator.

    Raises:
        HTTPException: 403 if performer is not an Admin, 404 if target not found
    """
    try:
        view = await service.update_role_status(user_id, request.to_domain(), performed_by)
    except (DomainError, RepositoryError) as e:
        raise _to_http(e)
    return UserResponse.from_view(view)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    """Get a user by ID."""
    try:
        view = await service.get_by_id(user_id)
    except RepositoryError as e:
        raise _to_http(e)

    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_view(view)


@router.get("", response_model=list[UserResponse])
async def list_users(service: UserService = Depends(get_user_service)):
    """List all users that are not soft-deleted."""
    try:
        views = await service.get_all()
    except RepositoryError as e:
        raise _to_http(e)
    return [UserResponse.from_view(v) for v in views]
