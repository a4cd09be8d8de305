"""Categories: public listing in display order, staff editing, admin deletion."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from blogcms.api.deps import require_route
from blogcms.core.database import get_db
from blogcms.schemas.auth import CurrentUser
from blogcms.schemas.category import (
    CategoryCreateRequest,
    CategoryRead,
    CategoryReorderRequest,
    CategoryUpdateRequest,
)
from blogcms.schemas.user import MessageResponse
from blogcms.services import categories as categories_service

router = APIRouter()

DbDep = Annotated[Session, Depends(get_db)]


@router.get("", response_model=list[CategoryRead])
def list_categories(db: DbDep) -> list[CategoryRead]:
    """Categories with post counts; the stored display order first, then by name."""
    return [CategoryRead(**c) for c in categories_service.list_categories(db)]


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreateRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("categories.create"))],
    db: DbDep,
) -> CategoryRead:
    category = categories_service.create_category(
        db, name=body.name, description=body.description, color=body.color
    )
    return CategoryRead(**categories_service.category_detail(db, category))


# Declared before /{category_id} so "reorder" is not parsed as an id.
@router.post("/reorder", response_model=MessageResponse)
def reorder_categories(
    body: CategoryReorderRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("categories.reorder"))],
    db: DbDep,
) -> MessageResponse:
    categories_service.reorder_categories(db, body.ids)
    return MessageResponse(message="Order updated")


@router.get("/{category_id}", response_model=CategoryRead)
def get_category(category_id: int, db: DbDep) -> CategoryRead:
    category = categories_service.get_category(db, category_id)
    return CategoryRead(**categories_service.category_detail(db, category))


@router.put("/{category_id}", response_model=CategoryRead)
def update_category(
    category_id: int,
    body: CategoryUpdateRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("categories.update"))],
    db: DbDep,
) -> CategoryRead:
    category = categories_service.update_category(db, category_id, body.model_dump(exclude_unset=True))
    return CategoryRead(**categories_service.category_detail(db, category))


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    _admin: Annotated[CurrentUser, Depends(require_route("categories.delete"))],
    db: DbDep,
) -> MessageResponse:
    """Delete a category (admin only); posts keep their other categories."""
    categories_service.delete_category(db, category_id)
    return MessageResponse(message="Category deleted")
