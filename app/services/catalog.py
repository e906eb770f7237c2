"""
Catalog management — create / read / update / soft-delete for categories,
subcategories and items, plus the paginated item and category listings.

Nothing is ever hard-deleted: DELETE flips is_active so that bookings and
price snapshots keep pointing at a real row.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, selectinload

from app.models.catalog import Addon, Category, Item, PricingKind, Subcategory
from app.schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    ItemCreate,
    ItemUpdate,
    SubcategoryCreate,
    SubcategoryUpdate,
    check_item_config,
)
from app.services.errors import (
    CategoryNotFound,
    DuplicateName,
    InvalidConfiguration,
    ItemNotFound,
    SubcategoryNotFound,
)
from app.settings import settings

logger = logging.getLogger(__name__)

CATEGORY_SORT_FIELDS = {
    "name": Category.name,
    "created_at": Category.created_at,
    "updated_at": Category.updated_at,
}
ITEM_SORT_FIELDS = {
    "name": Item.name,
    "created_at": Item.created_at,
    "updated_at": Item.updated_at,
    "pricing_kind": Item.pricing_kind,
}


@dataclass
class PageRequest:
    page: int = 1
    limit: int = settings.default_page_size
    sort_by: str = "name"
    order: str = "asc"
    search: Optional[str] = None
    active: Optional[bool] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class ItemFilters:
    category_id: Optional[uuid.UUID] = None
    subcategory_id: Optional[uuid.UUID] = None
    pricing_kind: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None


@dataclass
class PageResult:
    rows: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _paginate(
    db: Session, model, stmt: Select, criteria: list, paging: PageRequest, sort_column
) -> PageResult:
    total = db.execute(
        select(func.count()).select_from(model).where(*criteria)
    ).scalar_one()
    ordering = sort_column.desc() if paging.order.lower() == "desc" else sort_column.asc()
    page_stmt = (
        stmt.where(*criteria).order_by(ordering).offset(paging.offset).limit(paging.limit)
    )
    rows = list(db.execute(page_stmt).scalars())
    return PageResult(rows=rows, total=total, page=paging.page, limit=paging.limit)


# ── Categories ───────────────────────────────────────────────────────────────


def list_categories(db: Session, paging: PageRequest) -> PageResult:
    criteria = []
    if paging.search:
        criteria.append(Category.name.ilike(f"%{paging.search}%"))
    if paging.active is not None:
        criteria.append(Category.is_active.is_(paging.active))
    stmt = select(Category).options(selectinload(Category.subcategories))
    sort_column = CATEGORY_SORT_FIELDS.get(paging.sort_by, Category.name)
    return _paginate(db, Category, stmt, criteria, paging, sort_column)


def get_category(db: Session, category_id: uuid.UUID) -> Category:
    category = db.execute(
        select(Category)
        .where(Category.id == category_id)
        .options(selectinload(Category.subcategories))
    ).scalar_one_or_none()
    if category is None:
        raise CategoryNotFound(category_id)
    return category


def _ensure_category_name_free(
    db: Session, name: str, exclude_id: Optional[uuid.UUID] = None
) -> None:
    stmt = select(Category.id).where(Category.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise DuplicateName("Category with this name already exists", {"name": name})


def create_category(db: Session, payload: CategoryCreate) -> Category:
    _ensure_category_name_free(db, payload.name)
    category = Category(**payload.model_dump())
    db.add(category)
    db.commit()
    logger.info("Category %s created: %s", category.id, category.name)
    return get_category(db, category.id)


def update_category(db: Session, category_id: uuid.UUID, payload: CategoryUpdate) -> Category:
    category = get_category(db, category_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] != category.name:
        _ensure_category_name_free(db, changes["name"], exclude_id=category.id)

    tax_applicable = changes.get("tax_applicable", category.tax_applicable)
    tax_percentage = changes.get("tax_percentage", category.tax_percentage)
    if tax_applicable and tax_percentage is None:
        raise InvalidConfiguration(
            "Tax percentage is required when tax is applicable",
            {"category_id": str(category.id)},
        )

    for field, value in changes.items():
        setattr(category, field, value)
    db.commit()
    return category


def deactivate_category(db: Session, category_id: uuid.UUID) -> Category:
    category = get_category(db, category_id)
    category.is_active = False
    db.commit()
    logger.info("Category %s deactivated", category.id)
    return category


# ── Subcategories ────────────────────────────────────────────────────────────


def get_subcategory(db: Session, subcategory_id: uuid.UUID) -> Subcategory:
    subcategory = db.get(Subcategory, subcategory_id)
    if subcategory is None:
        raise SubcategoryNotFound(subcategory_id)
    return subcategory


def _ensure_subcategory_name_free(
    db: Session, category_id: uuid.UUID, name: str, exclude_id: Optional[uuid.UUID] = None
) -> None:
    stmt = select(Subcategory.id).where(
        Subcategory.category_id == category_id, Subcategory.name == name
    )
    if exclude_id is not None:
        stmt = stmt.where(Subcategory.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise DuplicateName(
            "Subcategory with this name already exists in the category",
            {"category_id": str(category_id), "name": name},
        )


def create_subcategory(
    db: Session, category_id: uuid.UUID, payload: SubcategoryCreate
) -> Subcategory:
    category = get_category(db, category_id)
    _ensure_subcategory_name_free(db, category.id, payload.name)
    subcategory = Subcategory(category_id=category.id, **payload.model_dump())
    db.add(subcategory)
    db.commit()
    logger.info("Subcategory %s created under category %s", subcategory.id, category.id)
    return subcategory


def update_subcategory(
    db: Session, subcategory_id: uuid.UUID, payload: SubcategoryUpdate
) -> Subcategory:
    subcategory = get_subcategory(db, subcategory_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] != subcategory.name:
        _ensure_subcategory_name_free(
            db, subcategory.category_id, changes["name"], exclude_id=subcategory.id
        )
    for field, value in changes.items():
        setattr(subcategory, field, value)
    db.commit()
    return subcategory


def deactivate_subcategory(db: Session, subcategory_id: uuid.UUID) -> Subcategory:
    subcategory = get_subcategory(db, subcategory_id)
    subcategory.is_active = False
    db.commit()
    logger.info("Subcategory %s deactivated", subcategory.id)
    return subcategory


# ── Items ────────────────────────────────────────────────────────────────────


def _item_query() -> Select:
    return select(Item).options(
        selectinload(Item.category),
        selectinload(Item.subcategory).selectinload(Subcategory.category),
        selectinload(Item.addons),
    )


def list_items(db: Session, paging: PageRequest, filters: ItemFilters) -> PageResult:
    criteria = []
    if paging.search:
        criteria.append(Item.name.ilike(f"%{paging.search}%"))
    if paging.active is not None:
        criteria.append(Item.is_active.is_(paging.active))
    if filters.category_id:
        criteria.append(Item.category_id == filters.category_id)
    if filters.subcategory_id:
        criteria.append(Item.subcategory_id == filters.subcategory_id)
    if filters.pricing_kind:
        criteria.append(Item.pricing_kind == filters.pricing_kind)

    # Price range only means something for static items
    if filters.min_price is not None or filters.max_price is not None:
        base_price = Item.pricing_config["base_price"].as_float()
        criteria.append(Item.pricing_kind == PricingKind.STATIC)
        if filters.min_price is not None:
            criteria.append(base_price >= filters.min_price)
        if filters.max_price is not None:
            criteria.append(base_price <= filters.max_price)

    sort_column = ITEM_SORT_FIELDS.get(paging.sort_by, Item.name)
    return _paginate(db, Item, _item_query(), criteria, paging, sort_column)


def get_item(db: Session, item_id: uuid.UUID) -> Item:
    # populate_existing: relationships may be stale after a parent move
    stmt = _item_query().where(Item.id == item_id).execution_options(populate_existing=True)
    item = db.execute(stmt).scalar_one_or_none()
    if item is None:
        raise ItemNotFound(item_id)
    return item


def _check_parent(
    db: Session, category_id: Optional[uuid.UUID], subcategory_id: Optional[uuid.UUID]
) -> None:
    if (category_id is None) == (subcategory_id is None):
        raise InvalidConfiguration(
            "Item must belong to exactly one of category_id or subcategory_id"
        )
    if category_id is not None and db.get(Category, category_id) is None:
        raise CategoryNotFound(category_id)
    if subcategory_id is not None and db.get(Subcategory, subcategory_id) is None:
        raise SubcategoryNotFound(subcategory_id)


def _ensure_item_name_free(
    db: Session,
    name: str,
    category_id: Optional[uuid.UUID],
    subcategory_id: Optional[uuid.UUID],
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    stmt = select(Item.id).where(Item.name == name)
    if category_id is not None:
        stmt = stmt.where(Item.category_id == category_id)
    else:
        stmt = stmt.where(Item.subcategory_id == subcategory_id)
    if exclude_id is not None:
        stmt = stmt.where(Item.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise DuplicateName(
            "Item with this name already exists under the same parent", {"name": name}
        )


def create_item(db: Session, payload: ItemCreate) -> Item:
    _check_parent(db, payload.category_id, payload.subcategory_id)
    _ensure_item_name_free(db, payload.name, payload.category_id, payload.subcategory_id)

    item = Item(**payload.model_dump(exclude={"addons"}))
    item.addons = [Addon(**addon.model_dump()) for addon in payload.addons]
    db.add(item)
    db.commit()
    logger.info(
        "Item %s created: %s [%s, %d addons]",
        item.id,
        item.name,
        item.pricing_kind,
        len(item.addons),
    )
    return get_item(db, item.id)


def update_item(db: Session, item_id: uuid.UUID, payload: ItemUpdate) -> Item:
    """
    Apply a partial update, then re-check the merged item: exactly one parent,
    pricing_config matching pricing_kind, availability only on bookable items.
    """
    item = get_item(db, item_id)
    changes = payload.model_dump(exclude_unset=True)

    # Moving to a new parent replaces the old one
    if "category_id" in changes and "subcategory_id" not in changes and changes["category_id"]:
        changes["subcategory_id"] = None
    if "subcategory_id" in changes and "category_id" not in changes and changes["subcategory_id"]:
        changes["category_id"] = None

    category_id = changes.get("category_id", item.category_id)
    subcategory_id = changes.get("subcategory_id", item.subcategory_id)
    _check_parent(db, category_id, subcategory_id)

    name = changes.get("name", item.name)
    _ensure_item_name_free(db, name, category_id, subcategory_id, exclude_id=item.id)

    try:
        check_item_config(
            changes.get("pricing_kind", item.pricing_kind),
            changes.get("pricing_config", item.pricing_config),
            changes.get("is_bookable", item.is_bookable),
            changes.get("availability_config", item.availability_config),
        )
    except ValueError as exc:
        raise InvalidConfiguration(str(exc), {"item_id": str(item.id)}) from exc

    for field, value in changes.items():
        setattr(item, field, value)
    db.commit()
    logger.info("Item %s updated: %s", item.id, sorted(changes))
    return get_item(db, item.id)


def deactivate_item(db: Session, item_id: uuid.UUID) -> Item:
    item = get_item(db, item_id)
    item.is_active = False
    db.commit()
    logger.info("Item %s deactivated", item.id)
    return item
