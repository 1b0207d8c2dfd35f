from datetime import datetime
from decimal import Decimal

import pytest

from catalog_shared.errors import (
    AddonMismatchError,
    ConflictError,
    DuplicateNameError,
    NotFoundError,
    ValidationFailedError,
)
from catalog_shared.store import PageRequest


def test_duplicate_category_name_is_case_insensitive(factory):
    factory.category(name="Meeting Rooms")

    with pytest.raises(DuplicateNameError):
        factory.category(name="meeting rooms")


def test_rename_to_existing_name_is_rejected(factory):
    factory.category(name="Rooms")
    desks = factory.category(name="Desks")

    with pytest.raises(DuplicateNameError):
        factory.categories.update_category(desks["id"], {"name": "Rooms"})


def test_category_delete_cascades(factory):
    category = factory.category()
    subcategory = factory.subcategory(category["id"])
    item = factory.item(subcategory["id"])

    result = factory.categories.delete_category(category["id"])

    assert result["subcategories_deactivated"] == 1
    assert result["items_deactivated"] == 1
    for lookup, entity_id in (
        (factory.categories.get_category, category["id"]),
        (factory.subcategories.get_subcategory, subcategory["id"]),
        (factory.items.get_item, item["id"]),
    ):
        with pytest.raises(NotFoundError):
            lookup(entity_id)


def test_subcategory_delete_cascades_to_items(factory):
    subcategory = factory.subcategory()
    factory.item(subcategory["id"])
    factory.item(subcategory["id"])

    result = factory.subcategories.delete_subcategory(subcategory["id"])

    assert result["items_deactivated"] == 2
    listed = factory.items.list_items({"subcategory_id": subcategory["id"], "is_active": True})
    assert listed["data"] == []


def test_subcategory_needs_existing_category(factory):
    with pytest.raises(NotFoundError):
        factory.subcategory(category_id=999)


def test_subcategory_tax_override_is_all_or_nothing(factory):
    with pytest.raises(ValidationFailedError):
        factory.subcategory(tax_applicable=True)


def test_tax_impact_counts_only_inheriting_subcategories(factory):
    category = factory.category(tax_percentage=Decimal("18"))
    inheriting = factory.subcategory(category["id"])
    overriding = factory.subcategory(
        category["id"], tax_applicable=True, tax_percentage=Decimal("5")
    )
    factory.item(inheriting["id"])
    factory.item(inheriting["id"])
    factory.item(overriding["id"])

    impact = factory.categories.preview_tax_change(category["id"], Decimal("20"))

    assert impact == {
        "current_tax": 18.0,
        "new_tax": 20.0,
        "affected_subcategories": 1,
        "affected_items": 2,
    }


def test_item_with_overlapping_tiers_is_not_stored(factory):
    subcategory = factory.subcategory()
    tiers = {
        "tiers": [
            {"min_quantity": 1, "max_quantity": 10, "price_per_unit": 50},
            {"min_quantity": 10, "max_quantity": 20, "price_per_unit": 45},
        ]
    }

    with pytest.raises(ConflictError):
        factory.item(subcategory["id"], pricing_type="tiered", pricing_details=tiers)
    assert factory.items.list_items({"subcategory_id": subcategory["id"]})["data"] == []


def test_bookable_item_requires_availability(factory):
    with pytest.raises(ValidationFailedError):
        factory.item(is_bookable=True, availability=None)


def test_bookable_item_rejects_unpadded_slot_times(factory):
    availability = {
        "days": ["monday"],
        "time_slots": [{"start_time": "9:00", "end_time": "9:30"}],
    }

    with pytest.raises(ValidationFailedError):
        factory.bookable_item(availability=availability)


def test_bookable_item_rejects_unknown_weekday(factory):
    availability = {
        "days": ["funday"],
        "time_slots": [{"start_time": "09:00", "end_time": "10:00"}],
    }

    with pytest.raises(ValidationFailedError):
        factory.bookable_item(availability=availability)


def test_dynamic_item_rejects_unknown_weekday_and_bad_times(factory):
    windows = {
        "time_windows": [
            {"day_of_week": "funday", "start_time": "9:00", "end_time": "9:59", "price": 30},
        ]
    }

    with pytest.raises(ValidationFailedError) as exc_info:
        factory.item(pricing_type="dynamic_time_based", pricing_details=windows)

    errors = exc_info.value.details["errors"]
    assert "time window day_of_week 'funday' is not a weekday" in errors
    assert "time window time '9:00' must be HH:MM" in errors


def test_item_update_revalidates_pricing(factory):
    item = factory.item()

    with pytest.raises(ValidationFailedError):
        factory.items.update_item(item["id"], {"pricing_details": {"static_price": -5}})


def test_item_payload_carries_no_price(factory):
    item = factory.item()

    assert "price" not in item
    assert "tax_percentage" not in item


def test_item_price_with_addons_and_tax(factory):
    category = factory.category(tax_percentage=Decimal("10"))
    subcategory = factory.subcategory(category["id"])
    item = factory.item(subcategory["id"], pricing_details={"static_price": 50})
    addon = factory.addon(item["id"], price=Decimal("5"))

    price = factory.items.get_item_price(item["id"], quantity=2, addon_ids=[addon["id"]])

    assert price["subtotal"] == 105.0
    assert price["tax_amount"] == 10.5
    assert price["final_price"] == 115.5
    assert price["tax_info"]["source"] == "category"


def test_item_price_rejects_foreign_addon(factory):
    item = factory.item()
    other = factory.item()
    addon = factory.addon(other["id"])

    with pytest.raises(AddonMismatchError):
        factory.items.get_item_price(item["id"], addon_ids=[addon["id"]])


def test_item_price_rejects_duplicate_addons(factory):
    item = factory.item()
    addon = factory.addon(item["id"], price=Decimal("10"))

    with pytest.raises(ValidationFailedError) as exc_info:
        factory.items.get_item_price(item["id"], addon_ids=[addon["id"], addon["id"]])
    assert exc_info.value.details == {"addon_ids": [addon["id"]]}


def test_dynamic_item_price_uses_requested_time(factory):
    windows = {
        "time_windows": [
            {"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00", "price": 30},
            {"day_of_week": "monday", "start_time": "13:00", "end_time": "17:00", "price": 40},
        ]
    }
    item = factory.item(pricing_type="dynamic_time_based", pricing_details=windows)

    price = factory.items.get_item_price(item["id"], at=datetime(2024, 1, 1, 14, 30))

    assert price["base_price"] == 40.0


def test_item_addons_are_grouped(factory):
    item = factory.item()
    factory.addon(item["id"], name="Cleaning fee", is_mandatory=True)
    factory.addon(item["id"], name="Projector", group_id="av", group_name="Audio/Visual")
    factory.addon(item["id"], name="Speakers", group_id="av", group_name="Audio/Visual")
    factory.addon(item["id"], name="Whiteboard")
    factory.addon(item["id"], name="Catering", group_id="food", is_mandatory=True)

    grouped = factory.items.get_item_addons(item["id"])

    assert [a["name"] for a in grouped["mandatory"]] == ["Cleaning fee", "Catering"]
    assert [a["name"] for a in grouped["optional"]] == ["Whiteboard"]
    assert [g["group_id"] for g in grouped["groups"]] == ["av"]
    assert [a["name"] for a in grouped["groups"][0]["addons"]] == ["Projector", "Speakers"]


def test_item_search_and_category_filter(factory):
    rooms = factory.category(name="Rooms")
    desks = factory.category(name="Desks")
    factory.item(factory.subcategory(rooms["id"])["id"], name="Boardroom")
    factory.item(factory.subcategory(desks["id"])["id"], name="Hot desk")

    by_category = factory.items.list_items({"category_id": rooms["id"]})
    by_search = factory.items.list_items({}, search="desk")

    assert [i["name"] for i in by_category["data"]] == ["Boardroom"]
    assert [i["name"] for i in by_search["data"]] == ["Hot desk"]


def test_pagination_metadata(factory):
    subcategory = factory.subcategory()
    for _ in range(3):
        factory.item(subcategory["id"])

    page = factory.items.list_items(
        {"subcategory_id": subcategory["id"]}, PageRequest(page=2, limit=2, sort_by="name", sort_order="asc")
    )

    assert len(page["data"]) == 1
    assert page["pagination"] == {
        "page": 2,
        "limit": 2,
        "total": 3,
        "total_pages": 2,
        "has_next_page": False,
        "has_prev_page": True,
    }


def test_addon_requires_existing_item(factory):
    with pytest.raises(NotFoundError):
        factory.addon(item_id=777)
