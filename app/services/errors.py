"""
Domain errors raised by the pricing and booking services.

Every error carries a stable machine-readable `code` and the HTTP status the
API layer maps it to. Services raise these and routers never catch them; the
exception handler registered in app.main renders them as ErrorResponse.
"""

from typing import Any, Optional

from fastapi import status


class CatalogBookingError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.__class__.__name__


# ── 404 ───────────────────────────────────────────────────────────────────────


class ItemNotFound(CatalogBookingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, item_id: Any):
        super().__init__("Item not found", {"item_id": str(item_id)})


class CategoryNotFound(CatalogBookingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, category_id: Any):
        super().__init__("Category not found", {"category_id": str(category_id)})


class SubcategoryNotFound(CatalogBookingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, subcategory_id: Any):
        super().__init__(
            "Subcategory not found", {"subcategory_id": str(subcategory_id)}
        )


class BookingNotFound(CatalogBookingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, booking_id: Any):
        super().__init__("Booking not found", {"booking_id": str(booking_id)})


# ── 400: deterministic outcomes of the input ─────────────────────────────────


class ItemInactive(CatalogBookingError):
    def __init__(self, item_id: Any):
        super().__init__("Item is not active", {"item_id": str(item_id)})


class InvalidConfiguration(CatalogBookingError):
    """Malformed pricing or availability configuration on an item."""


class MissingParameter(CatalogBookingError):
    """A parameter required by the item's pricing kind was not supplied."""


class Unavailable(CatalogBookingError):
    """No dynamic-price window covers the requested time."""


class NotBookable(CatalogBookingError):
    def __init__(self, item_id: Any):
        super().__init__("This item is not bookable", {"item_id": str(item_id)})


class OutsideAvailability(CatalogBookingError):
    """Requested day or time falls outside the item's configured availability."""


# ── 409 ───────────────────────────────────────────────────────────────────────


class SlotConflict(CatalogBookingError):
    status_code = status.HTTP_409_CONFLICT


class AlreadyCancelled(CatalogBookingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, booking_id: Any):
        super().__init__("Booking already cancelled", {"booking_id": str(booking_id)})


class InvalidTransition(CatalogBookingError):
    status_code = status.HTTP_409_CONFLICT


class DuplicateName(CatalogBookingError):
    status_code = status.HTTP_409_CONFLICT


# ── 503 ───────────────────────────────────────────────────────────────────────


class TransientStoreFailure(CatalogBookingError):
    """The store could not be reached or timed out. Safe for the caller to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
