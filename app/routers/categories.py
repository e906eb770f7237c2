"""
Category and subcategory management routes.

  GET    /categories                          → paginated list (search, active filter)
  POST   /categories                          → create
  GET    /categories/{id}                     → detail with active subcategories
  PUT    /categories/{id}                     → update
  DELETE /categories/{id}                     → soft delete (is_active = false)
  POST   /categories/{id}/subcategories       → create subcategory
  GET    /subcategories/{id}                  → detail
  PUT    /subcategories/{id}                  → update
  DELETE /subcategories/{id}                  → soft delete
"""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.catalog import (
    CategoryCreate,
    CategoryDetail,
    CategoryUpdate,
    Page,
    Pagination,
    SubcategoryCreate,
    SubcategoryResponse,
    SubcategoryUpdate,
)
from app.schemas.common import MessageResponse
from app.services import catalog
from app.settings import settings

router = APIRouter(tags=["catalog"])


# ── Categories ────────────────────────────────────────────────────────────────

@router.get("/categories", response_model=Page[CategoryDetail])
def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort_by: Literal["name", "created_at", "updated_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    search: Optional[str] = None,
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
) -> Page[CategoryDetail]:
    result = catalog.list_categories(
        db,
        catalog.PageRequest(
            page=page, limit=limit, sort_by=sort_by, order=order, search=search, active=active
        ),
    )
    return Page[CategoryDetail](
        data=[CategoryDetail.model_validate(c) for c in result.rows],
        pagination=Pagination(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        ),
    )


@router.post("/categories", response_model=CategoryDetail, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)) -> CategoryDetail:
    return CategoryDetail.model_validate(catalog.create_category(db, payload))


@router.get("/categories/{category_id}", response_model=CategoryDetail)
def get_category(category_id: uuid.UUID, db: Session = Depends(get_db)) -> CategoryDetail:
    return CategoryDetail.model_validate(catalog.get_category(db, category_id))


@router.put("/categories/{category_id}", response_model=CategoryDetail)
def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
) -> CategoryDetail:
    return CategoryDetail.model_validate(catalog.update_category(db, category_id, payload))


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def delete_category(category_id: uuid.UUID, db: Session = Depends(get_db)) -> MessageResponse:
    catalog.deactivate_category(db, category_id)
    return MessageResponse(message="Category deactivated successfully")


# ── Subcategories ─────────────────────────────────────────────────────────────

@router.post(
    "/categories/{category_id}/subcategories",
    response_model=SubcategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subcategory(
    category_id: uuid.UUID,
    payload: SubcategoryCreate,
    db: Session = Depends(get_db),
) -> SubcategoryResponse:
    return SubcategoryResponse.model_validate(
        catalog.create_subcategory(db, category_id, payload)
    )


@router.get("/subcategories/{subcategory_id}", response_model=SubcategoryResponse)
def get_subcategory(
    subcategory_id: uuid.UUID, db: Session = Depends(get_db)
) -> SubcategoryResponse:
    return SubcategoryResponse.model_validate(catalog.get_subcategory(db, subcategory_id))


@router.put("/subcategories/{subcategory_id}", response_model=SubcategoryResponse)
def update_subcategory(
    subcategory_id: uuid.UUID,
    payload: SubcategoryUpdate,
    db: Session = Depends(get_db),
) -> SubcategoryResponse:
    return SubcategoryResponse.model_validate(
        catalog.update_subcategory(db, subcategory_id, payload)
    )


@router.delete("/subcategories/{subcategory_id}", response_model=MessageResponse)
def delete_subcategory(
    subcategory_id: uuid.UUID, db: Session = Depends(get_db)
) -> MessageResponse:
    catalog.deactivate_subcategory(db, subcategory_id)
    return MessageResponse(message="Subcategory deactivated successfully")
