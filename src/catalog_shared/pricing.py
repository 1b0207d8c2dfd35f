"""
Pricing configuration types.

``Item.pricing_details`` is stored as JSON whose meaningful keys depend on
``Item.pricing_type``. ``parse_pricing_details`` turns that pair into exactly
one of the variants below so callers never have to guess which keys are
relevant.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from .constants import DAYS_OF_WEEK, TIME_PATTERN, DiscountType, PricingType
from .errors import InvalidPricingConfigError


@dataclass(frozen=True)
class Tier:
    min_quantity: int
    max_quantity: int
    price_per_unit: Decimal


@dataclass(frozen=True)
class TimeWindow:
    day_of_week: str
    start_time: str
    end_time: str
    price: Decimal


@dataclass(frozen=True)
class StaticPricing:
    static_price: Decimal


@dataclass(frozen=True)
class TieredPricing:
    tiers: tuple[Tier, ...] = ()


@dataclass(frozen=True)
class ComplimentaryPricing:
    pass


@dataclass(frozen=True)
class DiscountedPricing:
    base_price: Decimal
    discount_type: DiscountType
    discount_value: Decimal


@dataclass(frozen=True)
class DynamicTimePricing:
    time_windows: tuple[TimeWindow, ...] = ()
    unavailable_outside_windows: bool = False


PricingDetails = Union[
    StaticPricing, TieredPricing, ComplimentaryPricing, DiscountedPricing, DynamicTimePricing
]


@dataclass(frozen=True)
class TimeSlot:
    start_time: str
    end_time: str


@dataclass(frozen=True)
class Availability:
    days: tuple[str, ...] = ()
    time_slots: tuple[TimeSlot, ...] = field(default_factory=tuple)


def _decimal(value: Any, name: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidPricingConfigError(f"'{name}' is required")
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPricingConfigError(f"'{name}' must be a number")


def _quantity(value: Any, name: str) -> int:
    if value is None or isinstance(value, bool):
        raise InvalidPricingConfigError(f"'{name}' must be an integer")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidPricingConfigError(f"'{name}' must be an integer")
    if not number.is_finite() or number != number.to_integral_value():
        raise InvalidPricingConfigError(f"'{name}' must be an integer")
    return int(number)


def is_valid_time(value: Any) -> bool:
    """True for a zero-padded 24h ``HH:MM`` string."""
    return isinstance(value, str) and re.match(TIME_PATTERN, value) is not None


def _parse_tier(raw: dict[str, Any]) -> Tier:
    try:
        return Tier(
            min_quantity=_quantity(raw.get("min_quantity"), "min_quantity"),
            max_quantity=_quantity(raw.get("max_quantity"), "max_quantity"),
            price_per_unit=_decimal(raw.get("price_per_unit"), "price_per_unit"),
        )
    except AttributeError as exc:
        raise InvalidPricingConfigError(f"Invalid tier definition: {exc}")


def _parse_window(raw: dict[str, Any]) -> TimeWindow:
    try:
        return TimeWindow(
            day_of_week=str(raw["day_of_week"]),
            start_time=str(raw["start_time"]),
            end_time=str(raw["end_time"]),
            price=_decimal(raw.get("price"), "price"),
        )
    except (KeyError, TypeError) as exc:
        raise InvalidPricingConfigError(f"Invalid time window definition: {exc}")


def parse_pricing_details(pricing_type: str, details: dict[str, Any] | None) -> PricingDetails:
    """
    Build the pricing variant for ``pricing_type`` out of the stored JSON.

    Raises InvalidPricingConfigError for an unknown pricing type or when the
    keys the variant needs are missing.
    """
    details = details or {}

    if pricing_type == PricingType.STATIC:
        return StaticPricing(static_price=_decimal(details.get("static_price"), "static_price"))

    if pricing_type == PricingType.TIERED:
        return TieredPricing(tiers=tuple(_parse_tier(t) for t in details.get("tiers") or []))

    if pricing_type == PricingType.COMPLIMENTARY:
        return ComplimentaryPricing()

    if pricing_type == PricingType.DISCOUNTED:
        discount = details.get("discount")
        if not discount:
            raise InvalidPricingConfigError("No discount configuration found")
        try:
            discount_type = DiscountType(discount.get("discount_type"))
        except ValueError:
            raise InvalidPricingConfigError(
                f"Invalid discount type: {discount.get('discount_type')}"
            )
        return DiscountedPricing(
            base_price=_decimal(discount.get("base_price"), "base_price"),
            discount_type=discount_type,
            discount_value=_decimal(discount.get("discount_value"), "discount_value"),
        )

    if pricing_type == PricingType.DYNAMIC_TIME_BASED:
        return DynamicTimePricing(
            time_windows=tuple(_parse_window(w) for w in details.get("time_windows") or []),
            unavailable_outside_windows=bool(details.get("unavailable_outside_windows", False)),
        )

    raise InvalidPricingConfigError(f"Unknown pricing type: {pricing_type}")


def parse_availability(raw: dict[str, Any] | None) -> Availability | None:
    if not raw:
        return None
    days = tuple(str(day).lower() for day in raw.get("days") or [])
    unknown = [day for day in days if day not in DAYS_OF_WEEK]
    if unknown:
        raise InvalidPricingConfigError(f"Unknown weekday(s): {', '.join(unknown)}")
    try:
        slots = tuple(
            TimeSlot(start_time=str(slot["start_time"]), end_time=str(slot["end_time"]))
            for slot in raw.get("time_slots") or []
        )
    except (KeyError, TypeError) as exc:
        raise InvalidPricingConfigError(f"Invalid time slot definition: {exc}")
    return Availability(days=days, time_slots=slots)
