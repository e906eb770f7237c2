# Import all models here so Alembic's env.py can discover them via Base.metadata
from app.models.base import Base  # noqa: F401
from app.models.catalog import Category, Subcategory, Item, Addon  # noqa: F401
from app.models.booking import Booking  # noqa: F401
