"""
Booking orchestration: availability check, add-on validation and commit.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from catalog_shared.constants import (
    BOOKING_TRANSITIONS,
    ERROR_MESSAGES,
    BookingStatus,
)
from catalog_shared.errors import (
    AddonMismatchError,
    BookingConflictError,
    BookingStateError,
    ItemNotBookableError,
    NotFoundError,
    ValidationFailedError,
)
from catalog_shared.logging_config import LoggerAdapter, get_logger
from catalog_shared.models import Booking, Item
from catalog_shared.serializers import serialize_booking, serialize_page
from catalog_shared.services.availability_service import get_available_slots, is_slot_available
from catalog_shared.services.booking_committer import BookingCommitter, build_committer
from catalog_shared.store import CatalogStore, PageRequest

logger = get_logger(__name__)

_CREATABLE_STATUSES = {BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value}
_UPDATABLE_FIELDS = ("status", "notes", "user_name", "user_phone")


class BookingService:
    """Creates, lists and transitions bookings for bookable items."""

    def __init__(self, store: CatalogStore, committer: BookingCommitter | None = None):
        self.store = store
        self.committer = committer or build_committer(store)

    def create_booking(self, data: dict[str, Any]) -> dict[str, Any]:
        payload = dict(data)
        item_id = payload["item_id"]
        booking_date: date = payload["date"]
        log = LoggerAdapter(logger, {"item_id": item_id, "date": booking_date.isoformat()})

        if payload["end_time"] <= payload["start_time"]:
            raise ValidationFailedError("end_time must be after start_time")

        status = payload.get("status") or BookingStatus.PENDING.value
        if status not in _CREATABLE_STATUSES:
            raise ValidationFailedError(f"Bookings cannot be created with status '{status}'")
        payload["status"] = status

        with self.store.session() as session:
            item = self.store.get(session, Item, item_id)
            if item is None:
                raise NotFoundError(ERROR_MESSAGES["item_not_found"], {"item_id": item_id})
            if not item.is_bookable:
                raise ItemNotBookableError(
                    ERROR_MESSAGES["item_not_bookable"], {"item_id": item_id}
                )

            if not is_slot_available(
                self.store,
                session,
                item_id,
                booking_date,
                payload["start_time"],
                payload["end_time"],
            ):
                log.info("Booking rejected, slot already taken")
                raise BookingConflictError(ERROR_MESSAGES["booking_conflict"])

            addon_ids = payload.get("addon_ids") or []
            if addon_ids:
                payload["total_price"] = self._addon_total(session, item_id, addon_ids)
            payload["addon_ids"] = list(addon_ids) or None

        booking = self.committer.commit(payload)
        log.info("Booking created", extra={"booking_id": booking.id, "status": booking.status})
        return serialize_booking(booking)

    def _addon_total(self, session, item_id: int, addon_ids: list[int]) -> Decimal:
        duplicates = sorted({addon_id for addon_id in addon_ids if addon_ids.count(addon_id) > 1})
        if duplicates:
            raise ValidationFailedError("Duplicate addon ids", {"addon_ids": duplicates})

        addons = self.store.addons_by_ids(session, addon_ids)
        if len(addons) != len(addon_ids):
            found = {addon.id for addon in addons}
            missing = [addon_id for addon_id in addon_ids if addon_id not in found]
            raise NotFoundError("One or more addons not found", {"missing_addon_ids": missing})

        foreign = [addon.id for addon in addons if addon.item_id != item_id]
        if foreign:
            raise AddonMismatchError(
                "Addons do not belong to the selected item", {"addon_ids": foreign}
            )

        # Provisional snapshot only; the price endpoint is authoritative
        return sum((Decimal(str(addon.price)) for addon in addons), Decimal("0"))

    def get_booking(self, booking_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            booking = self.store.get(session, Booking, booking_id)
            if booking is None:
                raise NotFoundError(ERROR_MESSAGES["booking_not_found"])
            return serialize_booking(booking)

    def list_bookings(
        self, filters: dict[str, Any], page_request: PageRequest | None = None
    ) -> dict[str, Any]:
        with self.store.session() as session:
            page = self.store.list(session, Booking, filters, page_request)
            return serialize_page(page, serialize_booking)

    def get_user_bookings(self, user_email: str) -> list[dict[str, Any]]:
        with self.store.session() as session:
            page = self.store.list(
                session,
                Booking,
                {"user_email": user_email.strip().lower()},
                PageRequest(limit=self.store.max_page_size, sort_by="date", sort_order="desc"),
            )
            return [serialize_booking(booking) for booking in page.items]

    def update_booking(self, booking_id: int, data: dict[str, Any]) -> dict[str, Any]:
        changes = {key: data[key] for key in _UPDATABLE_FIELDS if data.get(key) is not None}

        with self.store.session() as session:
            booking = self.store.get(session, Booking, booking_id)
            if booking is None:
                raise NotFoundError(ERROR_MESSAGES["booking_not_found"])

            target = changes.get("status")
            if target is not None and target != booking.status:
                self._ensure_transition(booking.status, target)
                logger.info(
                    "Booking status changed",
                    extra={"booking_id": booking.id, "from": booking.status, "to": target},
                )
            booking = self.store.update(session, booking, changes)
            return serialize_booking(booking)

    def cancel_booking(self, booking_id: int) -> dict[str, Any]:
        return self.update_booking(booking_id, {"status": BookingStatus.CANCELLED.value})

    def get_available_slots(self, item_id: int, on_date: date) -> list[dict[str, Any]]:
        with self.store.session() as session:
            item = self.store.get(session, Item, item_id)
            if item is None:
                raise NotFoundError(ERROR_MESSAGES["item_not_found"], {"item_id": item_id})
            if not item.is_bookable:
                raise ItemNotBookableError(
                    ERROR_MESSAGES["item_not_bookable"], {"item_id": item_id}
                )
            slots = get_available_slots(self.store, session, item, on_date)
            return [slot.to_dict() for slot in slots]

    @staticmethod
    def _ensure_transition(current: str, target: str) -> None:
        try:
            current_status = BookingStatus(current)
            target_status = BookingStatus(target)
        except ValueError:
            raise ValidationFailedError(f"Unknown booking status '{target}'")

        if target_status not in BOOKING_TRANSITIONS[current_status]:
            raise BookingStateError(
                f"Invalid transition: {current_status.value} -> {target_status.value}",
                current_status.value,
                target_status.value,
            )
