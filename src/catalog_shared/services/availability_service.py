"""Slot listing and conflict checks for bookable items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from catalog_shared.constants import DAYS_OF_WEEK, ERROR_MESSAGES
from catalog_shared.errors import ItemNotBookableError
from catalog_shared.models import Item
from catalog_shared.pricing import parse_availability
from catalog_shared.services.pricing_validation import ranges_overlap
from catalog_shared.store import CatalogStore


@dataclass(frozen=True)
class SlotAvailability:
    start_time: str
    end_time: str
    is_available: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_available": self.is_available,
        }


def weekday_name(on_date: date) -> str:
    return DAYS_OF_WEEK[on_date.weekday()]


def get_available_slots(
    store: CatalogStore, session: Session, item: Item, on_date: date
) -> list[SlotAvailability]:
    """
    Configured slots for ``item`` on ``on_date``, in configured order.

    A slot is unavailable when any pending or confirmed booking that day
    overlaps it, touching boundaries included. Days outside the item's
    availability yield no slots at all.
    """
    availability = parse_availability(item.availability)
    if not item.is_bookable or availability is None:
        raise ItemNotBookableError(ERROR_MESSAGES["item_not_bookable"], {"item_id": item.id})

    if weekday_name(on_date) not in availability.days:
        return []

    bookings = store.bookings_on(session, item.id, on_date)
    return [
        SlotAvailability(
            start_time=slot.start_time,
            end_time=slot.end_time,
            is_available=not any(
                ranges_overlap(slot.start_time, slot.end_time, b.start_time, b.end_time)
                for b in bookings
            ),
        )
        for slot in availability.time_slots
    ]


def is_slot_available(
    store: CatalogStore,
    session: Session,
    item_id: int,
    on_date: date,
    start_time: str,
    end_time: str,
    exclude_id: int | None = None,
) -> bool:
    """True when no active booking overlaps ``[start_time, end_time]``."""
    conflicts = store.find_conflicting_bookings(
        session, item_id, on_date, start_time, end_time, exclude_id=exclude_id
    )
    return not conflicts
