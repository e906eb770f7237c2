"""
Catalog Store — read access to items with their full pricing/tax hierarchy.

The pricing and booking services only go through this class, never through
ad-hoc queries, so they stay independent of how the catalog is persisted.
"""

import uuid
from collections.abc import Iterable
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models.catalog import Addon, Item, Subcategory


class CatalogStore:
    def __init__(self, db: Session):
        self.db = db

    def get_item_with_ancestors(self, item_id: uuid.UUID) -> Optional[Item]:
        """Item with category, subcategory → category and addons eagerly loaded."""
        stmt = (
            select(Item)
            .where(Item.id == item_id)
            .options(
                selectinload(Item.category),
                selectinload(Item.subcategory).selectinload(Subcategory.category),
                selectinload(Item.addons),
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_addons_by_ids(
        self, addon_ids: Iterable[uuid.UUID], item_id: Optional[uuid.UUID] = None
    ) -> list[Addon]:
        """
        Active addons among the given ids, optionally restricted to one item.
        Unknown and inactive ids are silently dropped; duplicates count once.
        """
        ids = list({a for a in addon_ids or []})
        if not ids:
            return []
        stmt = select(Addon).where(Addon.id.in_(ids), Addon.is_active.is_(True))
        if item_id is not None:
            stmt = stmt.where(Addon.item_id == item_id)
        return list(self.db.execute(stmt.order_by(Addon.name)).scalars())
