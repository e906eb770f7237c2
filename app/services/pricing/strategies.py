"""
Pricing Strategy Engine — one strategy per pricing kind.

Given an item's pricing_kind + pricing_config and the call-time parameters,
compute the base price (before addons and tax) and a kind-specific
explanation payload.

Design principle: pure functions, no DB access, full Decimal precision.
Rounding to cents happens only in the breakdown builder's output.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional

from pydantic import ValidationError

from app.models.catalog import PricingKind
from app.schemas.config import (
    ComplimentaryConfig,
    DiscountedConfig,
    DynamicConfig,
    StaticConfig,
    TieredConfig,
    load_pricing_config,
)
from app.services.errors import InvalidConfiguration, MissingParameter, Unavailable
from app.services.timeslots import parse_hhmm

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class PricingParams:
    """Call-time pricing inputs. Addons are priced separately by the builder."""

    units: Optional[Decimal] = None
    duration: Optional[Decimal] = None  # hours; stands in for units when units is absent
    time: Optional[str] = None  # "HH:MM"
    addons: list = field(default_factory=list)


@dataclass
class PriceQuote:
    base_price: Decimal
    details: Optional[dict[str, Any]] = None


# ── Strategies ────────────────────────────────────────────────────────────────


def price_static(config: StaticConfig, params: PricingParams) -> PriceQuote:
    return PriceQuote(base_price=config.base_price)


def price_tiered(config: TieredConfig, params: PricingParams) -> PriceQuote:
    """
    First tier (ascending by max_units) whose max_units covers the quantity.
    A quantity above every tier is clamped to the highest tier's price.
    """
    quantity = params.units if params.units is not None else params.duration
    if quantity is None:
        raise MissingParameter("Units or duration required for tiered pricing")

    tiers = sorted(config.tiers, key=lambda t: t.max_units)
    selected = next((t for t in tiers if quantity <= t.max_units), tiers[-1])
    clamped = quantity > selected.max_units

    label = f"Up to {selected.max_units.normalize():f} units"
    if clamped:
        label += " (highest tier)"

    return PriceQuote(
        base_price=selected.price,
        details={
            "quantity": quantity,
            "tier": label,
            "tier_max_units": selected.max_units,
        },
    )


def price_complimentary(config: ComplimentaryConfig, params: PricingParams) -> PriceQuote:
    return PriceQuote(base_price=ZERO)


def price_discounted(config: DiscountedConfig, params: PricingParams) -> PriceQuote:
    """Percentage or flat discount off base_price, never below zero."""
    discount = config.discount
    if discount.type == "percentage":
        amount = config.base_price * discount.value / 100
    else:
        amount = discount.value

    final_price = max(ZERO, config.base_price - amount)
    return PriceQuote(
        base_price=final_price,
        details={
            "original_price": config.base_price,
            "discount_type": discount.type,
            "discount_value": discount.value,
            "discount_amount": amount,
        },
    )


def price_dynamic(config: DynamicConfig, params: PricingParams) -> PriceQuote:
    """
    First configured window with start <= time < end wins. Windows are
    evaluated in configured order; keeping them disjoint is the config's job.
    """
    if not params.time:
        raise MissingParameter("Time required for dynamic pricing")
    try:
        requested = parse_hhmm(params.time)
    except ValueError as exc:
        raise MissingParameter(f"A valid time is required for dynamic pricing: {exc}")

    for window in config.time_windows:
        if window.start_minutes <= requested < window.end_minutes:
            return PriceQuote(
                base_price=window.price,
                details={"requested_time": params.time, "time_window": window.label},
            )

    raise Unavailable(
        "Item not available at the requested time",
        {"requested_time": params.time},
    )


_STRATEGIES: dict[str, Callable[[Any, PricingParams], PriceQuote]] = {
    PricingKind.STATIC: price_static,
    PricingKind.TIERED: price_tiered,
    PricingKind.COMPLIMENTARY: price_complimentary,
    PricingKind.DISCOUNTED: price_discounted,
    PricingKind.DYNAMIC: price_dynamic,
}


# ── Dispatcher ────────────────────────────────────────────────────────────────


def calculate_base_price(
    pricing_kind: str, pricing_config: Optional[dict], params: PricingParams
) -> PriceQuote:
    """
    Parse the stored config for its kind and run the matching strategy.

    Raises:
        InvalidConfiguration: unknown pricing kind or malformed config
        MissingParameter:     tiered without units/duration, dynamic without time
        Unavailable:          dynamic pricing with no window covering the time
    """
    strategy = _STRATEGIES.get(pricing_kind)
    if strategy is None:
        raise InvalidConfiguration(
            f"Unknown pricing kind: {pricing_kind!r}",
            {"supported": PricingKind.ALL},
        )

    try:
        config = load_pricing_config(pricing_kind, pricing_config)
    except ValidationError as exc:
        logger.warning("Invalid %s pricing config: %s", pricing_kind, exc)
        errors = exc.errors(
            include_url=False, include_context=False, include_input=False
        )
        raise InvalidConfiguration(
            f"Invalid {pricing_kind} pricing configuration", {"errors": errors}
        )

    return strategy(config, params)
