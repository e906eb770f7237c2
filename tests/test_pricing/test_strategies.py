"""
Pricing strategy engine tests — pure functions, no DB.
"""

import pytest
from decimal import Decimal

from app.models.catalog import PricingKind
from app.services.errors import InvalidConfiguration, MissingParameter, Unavailable
from app.services.pricing.strategies import PricingParams, calculate_base_price

TIERS = {
    "tiers": [
        {"max_units": 1, "price": 300},
        {"max_units": 2, "price": 500},
        {"max_units": 4, "price": 800},
    ]
}

WINDOWS = {
    "time_windows": [
        {"start": "08:00", "end": "11:00", "price": 199},
        {"start": "11:00", "end": "14:00", "price": 249},
    ]
}


def _price(kind, config, **params) -> Decimal:
    return calculate_base_price(kind, config, PricingParams(**params)).base_price


class TestStaticAndComplimentary:
    def test_static_returns_base_price(self):
        assert _price(PricingKind.STATIC, {"base_price": 200}) == Decimal("200")

    def test_static_without_base_price_is_zero(self):
        assert _price(PricingKind.STATIC, {}) == Decimal("0")

    def test_complimentary_is_free(self):
        quote = calculate_base_price(PricingKind.COMPLIMENTARY, {}, PricingParams())
        assert quote.base_price == Decimal("0")
        assert quote.details is None


class TestTiered:
    @pytest.mark.parametrize(
        "units,expected",
        [
            (Decimal("0.5"), Decimal("300")),
            (Decimal("1"), Decimal("300")),
            (Decimal("1.5"), Decimal("500")),
            (Decimal("2"), Decimal("500")),
            (Decimal("3"), Decimal("800")),
            (Decimal("4"), Decimal("800")),
        ],
    )
    def test_first_covering_tier_wins(self, units, expected):
        assert _price(PricingKind.TIERED, TIERS, units=units) == expected

    @pytest.mark.parametrize("units", [Decimal("5"), Decimal("40")])
    def test_quantity_above_every_tier_clamps_to_highest(self, units):
        quote = calculate_base_price(PricingKind.TIERED, TIERS, PricingParams(units=units))
        assert quote.base_price == Decimal("800")
        assert quote.details["tier"] == "Up to 4 units (highest tier)"

    def test_tiers_are_sorted_before_matching(self):
        shuffled = {"tiers": list(reversed(TIERS["tiers"]))}
        assert _price(PricingKind.TIERED, shuffled, units=Decimal("1")) == Decimal("300")

    def test_duration_used_when_units_absent(self):
        assert _price(PricingKind.TIERED, TIERS, duration=Decimal("2")) == Decimal("500")

    def test_units_take_precedence_over_duration(self):
        price = _price(PricingKind.TIERED, TIERS, units=Decimal("1"), duration=Decimal("4"))
        assert price == Decimal("300")

    def test_missing_quantity_raises(self):
        with pytest.raises(MissingParameter):
            _price(PricingKind.TIERED, TIERS)

    def test_empty_tiers_is_invalid(self):
        with pytest.raises(InvalidConfiguration):
            _price(PricingKind.TIERED, {"tiers": []}, units=Decimal("1"))


class TestDiscounted:
    def test_percentage_discount(self):
        config = {"base_price": 250, "discount": {"type": "percentage", "value": 20}}
        quote = calculate_base_price(PricingKind.DISCOUNTED, config, PricingParams())
        assert quote.base_price == Decimal("200")
        assert quote.details["original_price"] == Decimal("250")
        assert quote.details["discount_amount"] == Decimal("50")

    def test_flat_discount(self):
        config = {"base_price": 250, "discount": {"type": "flat", "value": 30}}
        assert _price(PricingKind.DISCOUNTED, config) == Decimal("220")

    @pytest.mark.parametrize(
        "discount",
        [{"type": "flat", "value": 500}, {"type": "percentage", "value": 150}],
    )
    def test_price_never_negative(self, discount):
        config = {"base_price": 100, "discount": discount}
        assert _price(PricingKind.DISCOUNTED, config) == Decimal("0")

    def test_unknown_discount_type_is_invalid(self):
        config = {"base_price": 100, "discount": {"type": "bogo", "value": 1}}
        with pytest.raises(InvalidConfiguration):
            _price(PricingKind.DISCOUNTED, config)


class TestDynamic:
    @pytest.mark.parametrize(
        "time,expected",
        [
            ("08:00", Decimal("199")),
            ("10:59", Decimal("199")),
            ("11:00", Decimal("249")),
            ("13:30", Decimal("249")),
        ],
    )
    def test_window_lookup(self, time, expected):
        assert _price(PricingKind.DYNAMIC, WINDOWS, time=time) == expected

    @pytest.mark.parametrize("time", ["07:59", "14:00", "15:00"])
    def test_time_outside_every_window_is_unavailable(self, time):
        with pytest.raises(Unavailable):
            _price(PricingKind.DYNAMIC, WINDOWS, time=time)

    def test_missing_time_raises(self):
        with pytest.raises(MissingParameter):
            _price(PricingKind.DYNAMIC, WINDOWS)

    def test_malformed_time_raises(self):
        with pytest.raises(MissingParameter):
            _price(PricingKind.DYNAMIC, WINDOWS, time="noon")

    def test_details_name_the_window(self):
        quote = calculate_base_price(PricingKind.DYNAMIC, WINDOWS, PricingParams(time="11:00"))
        assert quote.details == {"requested_time": "11:00", "time_window": "11:00-14:00"}


class TestDispatcher:
    def test_unknown_kind_is_invalid(self):
        with pytest.raises(InvalidConfiguration) as exc_info:
            _price("auction", {})
        assert exc_info.value.details["supported"] == PricingKind.ALL

    def test_malformed_config_is_invalid(self):
        with pytest.raises(InvalidConfiguration):
            _price(PricingKind.STATIC, {"base_price": "lots"})

    def test_config_kind_key_is_ignored_in_favour_of_item_kind(self):
        assert _price(PricingKind.STATIC, {"kind": "tiered", "base_price": 10}) == Decimal("10")
