"""User administration (admin only) and self-service profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from blogcms.api.deps import require_route
from blogcms.core.database import get_db
from blogcms.schemas.auth import CurrentUser
from blogcms.schemas.user import (
    ActivityItem,
    ActivityListResponse,
    ChangePasswordRequest,
    MessageResponse,
    ProfileUpdateRequest,
    UserCreateRequest,
    UserDetail,
    UsersListResponse,
    UserUpdateRequest,
)
from blogcms.services import activity as activity_service
from blogcms.services import users as users_service

router = APIRouter()

DbDep = Annotated[Session, Depends(get_db)]


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_route("users.list"))],
    db: DbDep,
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(users=[UserDetail.model_validate(u) for u in users_service.list_users(db)])


# Self-service routes are declared before /{user_id} so "me" is not parsed as an id.
@router.get("/me", response_model=UserDetail)
def get_me(
    me: Annotated[CurrentUser, Depends(require_route("users.me"))],
    db: DbDep,
) -> UserDetail:
    return UserDetail.model_validate(users_service.get_user(db, me.id))


@router.put("/me", response_model=UserDetail)
def update_me(
    body: ProfileUpdateRequest,
    me: Annotated[CurrentUser, Depends(require_route("users.me.update"))],
    db: DbDep,
) -> UserDetail:
    """Update own email, names, bio or avatar."""
    changes = body.model_dump(exclude_unset=True)
    return UserDetail.model_validate(users_service.update_profile(db, me.id, changes))


@router.put("/me/password", response_model=MessageResponse)
def change_my_password(
    body: ChangePasswordRequest,
    me: Annotated[CurrentUser, Depends(require_route("users.me.password"))],
    db: DbDep,
) -> MessageResponse:
    users_service.change_password(db, me.id, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get("/me/activity", response_model=ActivityListResponse)
def my_activity(
    me: Annotated[CurrentUser, Depends(require_route("users.me.activity"))],
    db: DbDep,
) -> ActivityListResponse:
    """Latest 20 activity entries for the caller."""
    items = activity_service.recent_activity(db, me.id)
    return ActivityListResponse(items=[ActivityItem.model_validate(i) for i in items])


@router.get("/{user_id}", response_model=UserDetail)
def get_user(
    user_id: int,
    _admin: Annotated[CurrentUser, Depends(require_route("users.get"))],
    db: DbDep,
) -> UserDetail:
    return UserDetail.model_validate(users_service.get_user(db, user_id))


@router.post("", response_model=UserDetail, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    _admin: Annotated[CurrentUser, Depends(require_route("users.create"))],
    db: DbDep,
) -> UserDetail:
    user = users_service.create_user(
        db,
        email=body.email,
        username=body.username,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role,
    )
    return UserDetail.model_validate(user)


@router.put("/{user_id}", response_model=UserDetail)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    _admin: Annotated[CurrentUser, Depends(require_route("users.update"))],
    db: DbDep,
) -> UserDetail:
    changes = body.model_dump(exclude_unset=True)
    return UserDetail.model_validate(users_service.update_user(db, user_id, changes))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    _admin: Annotated[CurrentUser, Depends(require_route("users.delete"))],
    db: DbDep,
) -> MessageResponse:
    """Delete a user; 404 when the id does not exist."""
    users_service.delete_user(db, user_id)
    return MessageResponse(message="User deleted successfully")
