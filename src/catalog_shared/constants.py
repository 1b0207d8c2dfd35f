"""
Application constants and enums.
"""

from enum import Enum


class PricingType(str, Enum):
    STATIC = "static"
    TIERED = "tiered"
    COMPLIMENTARY = "complimentary"
    DISCOUNTED = "discounted"
    DYNAMIC_TIME_BASED = "dynamic_time_based"

    @classmethod
    def all_values(cls) -> set:
        return {member.value for member in cls}


class DiscountType(str, Enum):
    FLAT = "flat"
    PERCENTAGE = "percentage"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class TaxSource(str, Enum):
    SUBCATEGORY = "subcategory"
    CATEGORY = "category"
    NONE = "none"


# Index matches datetime.weekday()
DAYS_OF_WEEK = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# Statuses that hold a slot
ACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"

MIN_TAX_PERCENTAGE = 0
MAX_TAX_PERCENTAGE = 100
MAX_PRICE = 1_000_000
MAX_DISCOUNT_PERCENTAGE = 100

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

ERROR_MESSAGES = {
    "category_not_found": "Category not found",
    "subcategory_not_found": "Subcategory not found",
    "item_not_found": "Item not found",
    "addon_not_found": "Add-on not found",
    "booking_not_found": "Booking not found",
    "tier_overlap": "Tiered pricing has overlapping quantity ranges",
    "time_window_overlap": "Time windows have overlapping ranges",
    "booking_conflict": "Booking conflicts with existing reservation",
    "item_not_bookable": "This item is not available for booking",
    "duplicate_category": "Category with this name already exists",
}
