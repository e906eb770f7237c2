"""
Typed shapes for the JSON configuration stored on Item.

pricing_config is a discriminated union keyed on `kind` (the item's
pricing_kind), one model per pricing kind, so the pricing engine never has
to inspect raw dicts. availability_config is a single model.

Both are used twice: by the request schemas (reject bad config on write)
and by the services (parse what is stored before using it).
"""

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from app.services.timeslots import WEEKDAYS, format_minutes, parse_hhmm


class _TimeRange(BaseModel):
    """A [start, end) time-of-day range given as "HH:MM" strings."""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        return format_minutes(parse_hhmm(v))

    @model_validator(mode="after")
    def validate_order(self):
        if self.end_minutes <= self.start_minutes:
            raise ValueError(f"Window end {self.end} must be after start {self.start}")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.end)

    @property
    def label(self) -> str:
        return f"{self.start}-{self.end}"


# ── Pricing config variants ───────────────────────────────────────────────────


class Tier(BaseModel):
    max_units: Decimal = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)


class Discount(BaseModel):
    type: Literal["percentage", "flat"]
    value: Decimal = Field(..., ge=0)


class PriceWindow(_TimeRange):
    price: Decimal = Field(..., ge=0)


class StaticConfig(BaseModel):
    kind: Literal["static"] = "static"
    base_price: Decimal = Field(default=Decimal("0"), ge=0)


class TieredConfig(BaseModel):
    kind: Literal["tiered"] = "tiered"
    tiers: list[Tier] = Field(..., min_length=1)


class ComplimentaryConfig(BaseModel):
    kind: Literal["complimentary"] = "complimentary"


class DiscountedConfig(BaseModel):
    kind: Literal["discounted"] = "discounted"
    base_price: Decimal = Field(..., ge=0)
    discount: Discount


class DynamicConfig(BaseModel):
    kind: Literal["dynamic"] = "dynamic"
    time_windows: list[PriceWindow] = Field(..., min_length=1)


PricingConfig = Annotated[
    Union[StaticConfig, TieredConfig, ComplimentaryConfig, DiscountedConfig, DynamicConfig],
    Field(discriminator="kind"),
]

pricing_config_adapter: TypeAdapter[PricingConfig] = TypeAdapter(PricingConfig)


def load_pricing_config(pricing_kind: str, raw: Optional[dict]):
    """
    Validate a stored pricing_config against its pricing_kind.
    Raises pydantic.ValidationError for an unknown kind or a malformed shape.
    """
    data = dict(raw or {})
    data["kind"] = pricing_kind
    return pricing_config_adapter.validate_python(data)


# ── Availability config ───────────────────────────────────────────────────────


class TimeSlot(_TimeRange):
    pass


class AvailabilityConfig(BaseModel):
    # None = open every day / default window
    days: Optional[list[str]] = None
    time_slots: Optional[list[TimeSlot]] = None

    @field_validator("days")
    @classmethod
    def validate_days(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        unknown = [d for d in v if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday(s) {unknown}; expected one of {list(WEEKDAYS)}")
        return v
