"""
Item management and the price endpoint.

Pricing configuration is validated on every write so nothing overlapping or
malformed ever reaches storage.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from typing import Any, Sequence

from catalog_shared.constants import ERROR_MESSAGES
from catalog_shared.errors import (
    AddonMismatchError,
    InvalidPricingConfigError,
    NotFoundError,
    ValidationFailedError,
)
from catalog_shared.logging_config import get_logger
from catalog_shared.models import Item, Subcategory
from catalog_shared.pricing import is_valid_time, parse_availability, parse_pricing_details
from catalog_shared.serializers import serialize_addon, serialize_item, serialize_page
from catalog_shared.services.pricing_engine import PriceContext, calculate_price
from catalog_shared.services.pricing_validation import ensure_valid_pricing
from catalog_shared.services.tax_resolver import resolve_tax
from catalog_shared.store import CatalogStore, PageRequest

logger = get_logger(__name__)


def _reject_duplicate_addons(addon_ids: Sequence[int]) -> None:
    duplicates = sorted({addon_id for addon_id in addon_ids if addon_ids.count(addon_id) > 1})
    if duplicates:
        raise ValidationFailedError("Duplicate addon ids", {"addon_ids": duplicates})


def _validate_availability(is_bookable: bool, availability: dict[str, Any] | None) -> None:
    if not is_bookable:
        return
    try:
        parsed = parse_availability(availability)
    except InvalidPricingConfigError as exc:
        raise ValidationFailedError(exc.message)
    if parsed is None or not parsed.days or not parsed.time_slots:
        raise ValidationFailedError("Bookable items require availability with days and time slots")
    for slot in parsed.time_slots:
        if not is_valid_time(slot.start_time) or not is_valid_time(slot.end_time):
            raise ValidationFailedError(
                f"Time slot {slot.start_time}-{slot.end_time} must use HH:MM times",
                {"time_slot": {"start_time": slot.start_time, "end_time": slot.end_time}},
            )
        if slot.end_time <= slot.start_time:
            raise ValidationFailedError(
                f"Time slot {slot.start_time}-{slot.end_time} must end after it starts"
            )


class ItemService:
    def __init__(self, store: CatalogStore, revalidate_on_read: bool = False):
        self.store = store
        self.revalidate_on_read = revalidate_on_read

    def create_item(self, data: dict[str, Any]) -> dict[str, Any]:
        ensure_valid_pricing(parse_pricing_details(data["pricing_type"], data.get("pricing_details")))
        _validate_availability(data.get("is_bookable", False), data.get("availability"))

        with self.store.session() as session:
            if not self.store.exists(session, Subcategory, data["subcategory_id"]):
                raise NotFoundError(ERROR_MESSAGES["subcategory_not_found"])
            item = self.store.create(session, Item, data)
            logger.info(
                "Item created",
                extra={"item_id": item.id, "pricing_type": item.pricing_type},
            )
            return serialize_item(item)

    def get_item(self, item_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            return serialize_item(self._load(session, item_id))

    def list_items(
        self,
        filters: dict[str, Any],
        page_request: PageRequest | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        with self.store.session() as session:
            page = self.store.list(session, Item, filters, page_request, search=search)
            return serialize_page(page, serialize_item)

    def update_item(self, item_id: int, data: dict[str, Any]) -> dict[str, Any]:
        with self.store.session() as session:
            item = self.store.get(session, Item, item_id, include_inactive=True)
            if item is None:
                raise NotFoundError(ERROR_MESSAGES["item_not_found"])

            if data.get("subcategory_id") and not self.store.exists(
                session, Subcategory, data["subcategory_id"]
            ):
                raise NotFoundError(ERROR_MESSAGES["subcategory_not_found"])

            # Validate the configuration the item will have after the update
            if "pricing_type" in data or "pricing_details" in data:
                ensure_valid_pricing(
                    parse_pricing_details(
                        data.get("pricing_type", item.pricing_type),
                        data.get("pricing_details", item.pricing_details),
                    )
                )
            if "is_bookable" in data or "availability" in data:
                _validate_availability(
                    data.get("is_bookable", item.is_bookable),
                    data.get("availability", item.availability),
                )

            item = self.store.update(session, item, data)
            return serialize_item(item)

    def delete_item(self, item_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            item = self.store.get(session, Item, item_id, include_inactive=True)
            if item is None:
                raise NotFoundError(ERROR_MESSAGES["item_not_found"])
            self.store.soft_delete(session, item)
            logger.info("Item deleted", extra={"item_id": item_id})
            return {"message": "Item deleted successfully"}

    def get_item_price(
        self,
        item_id: int,
        quantity: int = 1,
        addon_ids: Sequence[int] = (),
        at: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Price breakdown for ``quantity`` units of an item with selected add-ons.

        ``at`` only matters for dynamic pricing and defaults to now.
        """
        with self.store.session() as session:
            item = self._load(session, item_id)
            addon_prices = self._addon_prices(session, item_id, addon_ids)
            tax_info = resolve_tax(session, item)
            breakdown = calculate_price(
                item,
                tax_info,
                PriceContext(
                    quantity=quantity,
                    current_time=at,
                    selected_addon_prices=addon_prices,
                ),
                revalidate=self.revalidate_on_read,
            )
            return {"item_id": item.id, "quantity": quantity, **breakdown.to_dict()}

    def get_item_addons(self, item_id: int) -> dict[str, Any]:
        """
        Active add-ons of an item split into mandatory, optional and per-group lists.

        Each add-on lands in exactly one list: mandatory ones under ``mandatory``,
        other grouped ones under their group and the rest under ``optional``.
        """
        with self.store.session() as session:
            self._load(session, item_id)
            addons = self.store.addons_of(session, item_id)

            groups: OrderedDict[str, dict[str, Any]] = OrderedDict()
            for addon in addons:
                if addon.is_mandatory or addon.group_id is None:
                    continue
                group = groups.setdefault(
                    addon.group_id,
                    {"group_id": addon.group_id, "group_name": addon.group_name, "addons": []},
                )
                group["addons"].append(serialize_addon(addon))

            return {
                "item_id": item_id,
                "mandatory": [serialize_addon(a) for a in addons if a.is_mandatory],
                "optional": [
                    serialize_addon(a)
                    for a in addons
                    if not a.is_mandatory and a.group_id is None
                ],
                "groups": list(groups.values()),
            }

    def _load(self, session, item_id: int) -> Item:
        item = self.store.get(session, Item, item_id)
        if item is None:
            raise NotFoundError(ERROR_MESSAGES["item_not_found"], {"item_id": item_id})
        return item

    def _addon_prices(self, session, item_id: int, addon_ids: Sequence[int]) -> list[Decimal]:
        if not addon_ids:
            return []
        _reject_duplicate_addons(addon_ids)
        addons = self.store.addons_by_ids(session, list(addon_ids))
        found = {addon.id for addon in addons}
        missing = [addon_id for addon_id in addon_ids if addon_id not in found]
        if missing:
            raise NotFoundError("One or more addons not found", {"missing_addon_ids": missing})
        foreign = [addon.id for addon in addons if addon.item_id != item_id]
        if foreign:
            raise AddonMismatchError(
                "Addons do not belong to the selected item", {"addon_ids": foreign}
            )
        return [Decimal(str(addon.price)) for addon in addons]
