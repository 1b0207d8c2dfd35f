from datetime import datetime
from decimal import Decimal

import pytest

from catalog_shared.constants import TaxSource
from catalog_shared.errors import (
    ConflictError,
    NoMatchingTierError,
    OutsideWindowError,
    ValidationFailedError,
)
from catalog_shared.models import Item
from catalog_shared.services.pricing_engine import PriceContext, calculate_price
from catalog_shared.services.tax_resolver import NO_TAX, TaxInfo

TEN_PERCENT = TaxInfo(tax_applicable=True, tax_percentage=Decimal("10"), source=TaxSource.CATEGORY)

# 2024-01-01 is a Monday
MONDAY_10AM = datetime(2024, 1, 1, 10, 0)
MONDAY_6PM = datetime(2024, 1, 1, 18, 0)

TIERS = {
    "tiers": [
        {"min_quantity": 1, "max_quantity": 10, "price_per_unit": 50},
        {"min_quantity": 11, "max_quantity": 50, "price_per_unit": 45},
    ]
}

WINDOWS = {
    "time_windows": [
        {"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00", "price": 30},
        {"day_of_week": "monday", "start_time": "13:00", "end_time": "17:00", "price": 40},
    ]
}


def make_item(pricing_type, pricing_details):
    return Item(id=1, name="Test", pricing_type=pricing_type, pricing_details=pricing_details)


def test_static_price_multiplies_by_quantity():
    item = make_item("static", {"static_price": 50})
    breakdown = calculate_price(item, NO_TAX, PriceContext(quantity=3))

    assert breakdown.base_price == Decimal("50")
    assert breakdown.subtotal == Decimal("150")
    assert breakdown.tax_amount == Decimal("0")
    assert breakdown.final_price == Decimal("150")
    assert breakdown.applied_rule == "Static price: 50"


def test_tax_is_applied_to_subtotal():
    item = make_item("static", {"static_price": 50})
    breakdown = calculate_price(item, TEN_PERCENT, PriceContext(quantity=3))

    assert breakdown.tax_amount == Decimal("15")
    assert breakdown.final_price == Decimal("165")


def test_addons_are_added_once_regardless_of_quantity():
    item = make_item("static", {"static_price": 10})
    context = PriceContext(quantity=2, selected_addon_prices=[Decimal("5"), Decimal("2.5")])
    breakdown = calculate_price(item, NO_TAX, context)

    assert breakdown.addons_total == Decimal("7.5")
    assert breakdown.subtotal == Decimal("27.5")


def test_tiered_price_picks_matching_tier():
    breakdown = calculate_price(make_item("tiered", TIERS), NO_TAX, PriceContext(quantity=11))

    assert breakdown.base_price == Decimal("45")
    assert breakdown.subtotal == Decimal("495")
    assert breakdown.applied_rule == "Tier: 11-50 units @ 45 per unit"


@pytest.mark.parametrize("quantity", [0, 1000])
def test_tiered_price_without_matching_tier(quantity):
    with pytest.raises(NoMatchingTierError):
        calculate_price(make_item("tiered", TIERS), NO_TAX, PriceContext(quantity=quantity))


def test_complimentary_is_free_even_with_tax():
    breakdown = calculate_price(make_item("complimentary", {}), TEN_PERCENT)

    assert breakdown.final_price == Decimal("0")
    assert breakdown.applied_rule == "Complimentary (Free)"


def test_percentage_discount():
    details = {"discount": {"base_price": 100, "discount_type": "percentage", "discount_value": 20}}
    breakdown = calculate_price(make_item("discounted", details), NO_TAX)

    assert breakdown.base_price == Decimal("80")
    assert breakdown.discount_amount == Decimal("20")
    assert breakdown.applied_rule == "Base: 100, Discount: 20% = 80"


def test_flat_discount():
    details = {"discount": {"base_price": 100, "discount_type": "flat", "discount_value": 15}}
    breakdown = calculate_price(make_item("discounted", details), NO_TAX)

    assert breakdown.base_price == Decimal("85")
    assert breakdown.discount_amount == Decimal("15")


def test_dynamic_price_inside_window():
    breakdown = calculate_price(
        make_item("dynamic_time_based", WINDOWS), NO_TAX, PriceContext(current_time=MONDAY_10AM)
    )

    assert breakdown.base_price == Decimal("30")
    assert breakdown.applied_rule == "monday 09:00-12:00: 30"


def test_dynamic_price_falls_back_to_first_window():
    breakdown = calculate_price(
        make_item("dynamic_time_based", WINDOWS), NO_TAX, PriceContext(current_time=MONDAY_6PM)
    )

    assert breakdown.base_price == Decimal("30")
    assert breakdown.applied_rule == "Default price (outside time windows)"


def test_dynamic_price_outside_windows_when_unavailable():
    details = dict(WINDOWS, unavailable_outside_windows=True)
    with pytest.raises(OutsideWindowError):
        calculate_price(
            make_item("dynamic_time_based", details),
            NO_TAX,
            PriceContext(current_time=MONDAY_6PM),
        )


def test_zero_quantity_rejected_for_non_tiered_items():
    with pytest.raises(ValidationFailedError):
        calculate_price(make_item("static", {"static_price": 5}), NO_TAX, PriceContext(quantity=0))


def test_revalidate_detects_stored_overlap():
    overlapping = {
        "tiers": [
            {"min_quantity": 1, "max_quantity": 10, "price_per_unit": 50},
            {"min_quantity": 10, "max_quantity": 20, "price_per_unit": 45},
        ]
    }
    item = make_item("tiered", overlapping)

    assert calculate_price(item, NO_TAX, PriceContext(quantity=5)).base_price == Decimal("50")
    with pytest.raises(ConflictError):
        calculate_price(item, NO_TAX, PriceContext(quantity=5), revalidate=True)


def test_breakdown_serializes_money_as_numbers():
    breakdown = calculate_price(make_item("static", {"static_price": 50}), TEN_PERCENT)
    payload = breakdown.to_dict()

    assert payload["final_price"] == 55.0
    assert payload["tax_info"] == {"tax_applicable": True, "tax_percentage": 10.0, "source": "category"}
