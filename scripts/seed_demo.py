"""
Demo seed script — a small catalog covering every pricing kind and every
level of the tax inheritance chain.

  Beverages (5%)
    Hot Drinks (inherits 5%)      → Cappuccino        static 200, addons Extra shot 50 / Oat milk 40
    Cold Drinks (own 8%)          → Welcome Drink     complimentary
                                  → Iced Coffee       discounted 250 − 20%
  Meeting Rooms (18%)             → Conference Room A tiered by hours, bookable 09:00–18:00
  Food (10%)
    Breakfast (inherits 10%)      → Breakfast Combo   dynamic 199 / 249

Usage:
    alembic upgrade head          # Postgres; SQLite tables are created here
    python scripts/seed_demo.py

Idempotent — safe to re-run; skips records that already exist.
"""

import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import SessionLocal, engine
from app.models import Addon, Base, Category, Item, Subcategory
from app.models.catalog import PricingKind
from app.settings import settings

# ── Demo data constants ────────────────────────────────────────────────────────

# name → (description, tax_applicable, tax_percentage)
CATEGORIES = {
    "Beverages": ("Hot and cold beverages", True, Decimal("5")),
    "Meeting Rooms": ("Conference and meeting spaces", True, Decimal("18")),
    "Food": ("Main course and snacks", True, Decimal("10")),
}

# (category, name, description, tax_applicable, tax_percentage)
SUBCATEGORIES = [
    ("Beverages", "Hot Drinks", "Coffee, tea, and hot beverages", None, None),
    ("Beverages", "Cold Drinks", "Iced beverages and smoothies", True, Decimal("8")),
    ("Food", "Breakfast", "Morning breakfast items", None, None),
]

ALL_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Each item names exactly one parent: ("category", name) or ("subcategory", name)
ITEMS = [
    {
        "parent": ("subcategory", "Hot Drinks"),
        "name": "Cappuccino",
        "description": "Rich espresso with steamed milk",
        "pricing_kind": PricingKind.STATIC,
        "pricing_config": {"base_price": 200},
        "addons": [("Extra shot", Decimal("50")), ("Oat milk", Decimal("40"))],
    },
    {
        "parent": ("category", "Meeting Rooms"),
        "name": "Conference Room A",
        "description": "Large conference room with projector",
        "pricing_kind": PricingKind.TIERED,
        "pricing_config": {
            "tiers": [
                {"max_units": 1, "price": 300},
                {"max_units": 2, "price": 500},
                {"max_units": 4, "price": 800},
            ]
        },
        "is_bookable": True,
        "availability_config": {
            "days": ALL_WEEK,
            "time_slots": [{"start": "09:00", "end": "18:00"}],
        },
        "addons": [("Projector", Decimal("100")), ("Whiteboard", Decimal("50"))],
    },
    {
        "parent": ("subcategory", "Breakfast"),
        "name": "Breakfast Combo",
        "description": "Eggs, toast, and coffee",
        "pricing_kind": PricingKind.DYNAMIC,
        "pricing_config": {
            "time_windows": [
                {"start": "08:00", "end": "11:00", "price": 199},
                {"start": "11:00", "end": "14:00", "price": 249},
            ]
        },
    },
    {
        "parent": ("subcategory", "Cold Drinks"),
        "name": "Welcome Drink",
        "description": "Complimentary welcome beverage",
        "pricing_kind": PricingKind.COMPLIMENTARY,
        "pricing_config": {},
    },
    {
        "parent": ("subcategory", "Cold Drinks"),
        "name": "Iced Coffee",
        "description": "Cold brew coffee with ice",
        "pricing_kind": PricingKind.DISCOUNTED,
        "pricing_config": {
            "base_price": 250,
            "discount": {"type": "percentage", "value": 20},
        },
    },
]


def main() -> None:
    print("\n=== Catalog & Booking — Demo Seed ===\n")

    if settings.is_sqlite:
        Base.metadata.create_all(bind=engine)
        print("✓ SQLite tables ensured")

    db = SessionLocal()
    try:
        # ── Categories ─────────────────────────────────────────────────────────
        categories: dict[str, Category] = {}
        for name, (description, tax_applicable, tax_percentage) in CATEGORIES.items():
            category = db.query(Category).filter(Category.name == name).first()
            if category:
                print(f"✓ Category '{name}' already exists — skipping.")
            else:
                category = Category(
                    name=name,
                    description=description,
                    tax_applicable=tax_applicable,
                    tax_percentage=tax_percentage,
                )
                db.add(category)
                db.flush()
                print(f"✓ Category '{name}' created (tax {tax_percentage}%)")
            categories[name] = category

        # ── Subcategories ──────────────────────────────────────────────────────
        subcategories: dict[str, Subcategory] = {}
        for parent, name, description, tax_applicable, tax_percentage in SUBCATEGORIES:
            category = categories[parent]
            subcategory = (
                db.query(Subcategory)
                .filter(Subcategory.category_id == category.id, Subcategory.name == name)
                .first()
            )
            if subcategory:
                print(f"✓ Subcategory '{name}' already exists — skipping.")
            else:
                subcategory = Subcategory(
                    category_id=category.id,
                    name=name,
                    description=description,
                    tax_applicable=tax_applicable,
                    tax_percentage=tax_percentage,
                )
                db.add(subcategory)
                db.flush()
                inherited = "inherits" if tax_applicable is None else f"own {tax_percentage}%"
                print(f"✓ Subcategory '{parent} / {name}' created (tax {inherited})")
            subcategories[name] = subcategory

        # ── Items + addons ─────────────────────────────────────────────────────
        for entry in ITEMS:
            level, parent_name = entry["parent"]
            parent_fields = (
                {"category_id": categories[parent_name].id}
                if level == "category"
                else {"subcategory_id": subcategories[parent_name].id}
            )
            existing = db.query(Item).filter(Item.name == entry["name"]).first()
            if existing:
                print(f"✓ Item '{entry['name']}' already exists — skipping.")
                continue

            item = Item(
                name=entry["name"],
                description=entry["description"],
                pricing_kind=entry["pricing_kind"],
                pricing_config=entry["pricing_config"],
                is_bookable=entry.get("is_bookable", False),
                availability_config=entry.get("availability_config"),
                addons=[
                    Addon(name=addon_name, price=price)
                    for addon_name, price in entry.get("addons", [])
                ],
                **parent_fields,
            )
            db.add(item)
            db.flush()
            print(
                f"✓ Item '{item.name}' created ({item.pricing_kind}, "
                f"{len(item.addons)} addons)"
            )

        db.commit()

        print("\n✅ Demo seed complete.\n")
        print("Try:")
        print("  GET  /items?search=coffee")
        print("  GET  /items/{cappuccino_id}/price?addons={extra_shot_id},{oat_milk_id}")
        print("  GET  /items/{conference_room_id}/available-slots?date=YYYY-MM-DD")
        print("  POST /bookings\n")

    except Exception as e:
        db.rollback()
        print(f"\nERROR: {e}")
        import traceback

        traceback.print_exc()
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
