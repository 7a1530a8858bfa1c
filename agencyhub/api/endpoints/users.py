"""
User Management Endpoints

Users of the caller's agency (or, for a super_admin, of the agency named
in X-Agency-Id).

RBAC:
- List/get users: any member of the agency
- Create user: manage-team
- Update user: manage-team, or the user themselves for profile fields
- Delete user: manage-team; removing the last member removes the agency
"""
from fastapi import APIRouter, Depends, status, Query
from typing import Optional

from agencyhub.api.deps import get_caller_context, get_current_user, get_data_access, get_target_agency_id
from agencyhub.core.context import CallerContext
from agencyhub.core.exceptions import NotFound
from agencyhub.models.user import User, UserRole
from agencyhub.schemas.cascade import CascadeReportResponse
from agencyhub.schemas.common import Page
from agencyhub.schemas.user import UserCreate, UserResponse, UserUpdate
from agencyhub.services.data_access import DataAccessAPI
from agencyhub.utils.logging import caller_extra, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=Page[UserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    context: CallerContext = Depends(get_caller_context),
    target_agency_id: Optional[str] = Depends(get_target_agency_id),
    api: DataAccessAPI = Depends(get_data_access)
):
    """List users in the agency, optionally filtered by role and active status."""
    filters = {}
    if role:
        filters["role"] = role.value
    if is_active is not None:
        filters["is_active"] = is_active

    users, total = api.list(
        context,
        "users",
        filters=filters,
        limit=page_size,
        offset=(page - 1) * page_size,
        target_agency_id=target_agency_id,
    )
    return Page[UserResponse](items=users, total=total, page=page, page_size=page_size)


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    context: CallerContext = Depends(get_caller_context),
    target_agency_id: Optional[str] = Depends(get_target_agency_id),
    api: DataAccessAPI = Depends(get_data_access)
):
    user = api.get(context, "users", user_id, target_agency_id=target_agency_id)
    if user is None:
        raise NotFound("User", user_id)
    return user


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    context: CallerContext = Depends(get_caller_context),
    target_agency_id: Optional[str] = Depends(get_target_agency_id),
    api: DataAccessAPI = Depends(get_data_access)
):
    """
    Add a user to the agency.

    Only a super_admin may create another super_admin.
    """
    user = api.create(
        context,
        "users",
        user_data.model_dump(exclude_none=True),
        target_agency_id=target_agency_id,
    )
    logger.info(f"User created: {user.id}", extra=caller_extra(context))
    return user


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    context: CallerContext = Depends(get_caller_context),
    target_agency_id: Optional[str] = Depends(get_target_agency_id),
    api: DataAccessAPI = Depends(get_data_access)
):
    """
    Update user information.

    Users may change their own email, name and password. Role and
    activation changes need manage-team.
    """
    user = api.update(
        context,
        "users",
        user_id,
        user_data.model_dump(exclude_unset=True),
        target_agency_id=target_agency_id,
    )
    logger.info(f"User updated: {user.id}", extra=caller_extra(context))
    return user


@router.delete("/{identifier}", response_model=CascadeReportResponse)
async def delete_user(
    identifier: str,
    context: CallerContext = Depends(get_caller_context),
    target_agency_id: Optional[str] = Depends(get_target_agency_id),
    api: DataAccessAPI = Depends(get_data_access)
):
    """
    Delete a user by id or email.

    When the user is the agency's last member the agency and all of its
    records are deleted in the same transaction. The response lists how
    many rows were removed per table.
    """
    report = api.delete_user_and_maybe_agency(context, identifier, target_agency_id=target_agency_id)
    return CascadeReportResponse.model_validate(report)
