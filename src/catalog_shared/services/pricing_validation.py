"""
Configuration-time checks for tiered and time-window pricing.

These run when an item is created or updated. The pricing engine trusts data
that passed them and does not re-check on read unless asked to.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from catalog_shared.constants import (
    DAYS_OF_WEEK,
    ERROR_MESSAGES,
    MAX_DISCOUNT_PERCENTAGE,
    DiscountType,
)
from catalog_shared.errors import (
    ConflictError,
    InvalidPricingConfigError,
    ValidationFailedError,
)
from catalog_shared.pricing import (
    ComplimentaryPricing,
    DiscountedPricing,
    DynamicTimePricing,
    PricingDetails,
    StaticPricing,
    Tier,
    TieredPricing,
    TimeWindow,
    is_valid_time,
)

_FLAT_DISCOUNT_TOO_HIGH = "flat discount cannot exceed base_price"
_PERCENTAGE_DISCOUNT_TOO_HIGH = "percentage discount cannot exceed 100"


def ranges_overlap(a_start, a_end, b_start, b_end) -> bool:
    """
    Inclusive overlap test on closed ranges, checked in both directions.

    Touching endpoints count as overlapping: ``[09:00, 12:00]`` and
    ``[12:00, 13:00]`` overlap.
    """
    return (a_start <= b_end and a_end >= b_start) or (b_start <= a_end and b_end >= a_start)


def validate_tiered_pricing(tiers: Sequence[Tier]) -> bool:
    """True when no two tiers share a quantity. Adjacent tiers are fine."""
    for i, first in enumerate(tiers):
        for second in tiers[i + 1 :]:
            if ranges_overlap(
                first.min_quantity, first.max_quantity, second.min_quantity, second.max_quantity
            ):
                return False
    return True


def validate_time_windows(windows: Iterable[TimeWindow]) -> bool:
    """True when no two windows on the same weekday overlap."""
    by_day: dict[str, list[TimeWindow]] = defaultdict(list)
    for window in windows:
        by_day[window.day_of_week.lower()].append(window)

    for day_windows in by_day.values():
        for i, first in enumerate(day_windows):
            for second in day_windows[i + 1 :]:
                if ranges_overlap(
                    first.start_time, first.end_time, second.start_time, second.end_time
                ):
                    return False
    return True


def _check_static(details: StaticPricing) -> list[str]:
    if details.static_price < 0:
        return ["static_price must be greater than or equal to 0"]
    return []


def _check_tiered(details: TieredPricing) -> list[str]:
    if not details.tiers:
        return ["tiered pricing requires at least one tier"]
    errors = []
    for tier in details.tiers:
        if tier.min_quantity < 1 or tier.max_quantity < 1:
            errors.append("tier quantities must be at least 1")
        if tier.min_quantity > tier.max_quantity:
            errors.append(
                f"tier min_quantity {tier.min_quantity} exceeds max_quantity {tier.max_quantity}"
            )
        if tier.price_per_unit < 0:
            errors.append("tier price_per_unit must be greater than or equal to 0")
    if not validate_tiered_pricing(details.tiers):
        errors.append(ERROR_MESSAGES["tier_overlap"])
    return errors


def _check_complimentary(details: ComplimentaryPricing) -> list[str]:
    return []


def _check_discounted(details: DiscountedPricing) -> list[str]:
    errors = []
    if details.base_price < 0:
        errors.append("base_price must be greater than or equal to 0")
    if details.discount_value < 0:
        errors.append("discount_value must be greater than or equal to 0")
    if details.discount_type == DiscountType.FLAT and details.discount_value > details.base_price:
        errors.append(_FLAT_DISCOUNT_TOO_HIGH)
    if details.discount_type == DiscountType.PERCENTAGE and details.discount_value > Decimal(
        MAX_DISCOUNT_PERCENTAGE
    ):
        errors.append(_PERCENTAGE_DISCOUNT_TOO_HIGH)
    return errors


def _check_dynamic(details: DynamicTimePricing) -> list[str]:
    if not details.time_windows:
        return ["dynamic_time_based pricing requires at least one time window"]
    errors = []
    for window in details.time_windows:
        if window.day_of_week.lower() not in DAYS_OF_WEEK:
            errors.append(f"time window day_of_week '{window.day_of_week}' is not a weekday")
        bad_times = [t for t in (window.start_time, window.end_time) if not is_valid_time(t)]
        if bad_times:
            errors.extend(f"time window time '{t}' must be HH:MM" for t in bad_times)
        elif window.end_time <= window.start_time:
            errors.append(
                f"time window {window.day_of_week} {window.start_time}-{window.end_time} "
                "must end after it starts"
            )
        if window.price < 0:
            errors.append("time window price must be greater than or equal to 0")
    well_formed = [
        w
        for w in details.time_windows
        if is_valid_time(w.start_time) and is_valid_time(w.end_time)
    ]
    if not validate_time_windows(well_formed):
        errors.append(ERROR_MESSAGES["time_window_overlap"])
    return errors


_CHECKS = {
    StaticPricing: _check_static,
    TieredPricing: _check_tiered,
    ComplimentaryPricing: _check_complimentary,
    DiscountedPricing: _check_discounted,
    DynamicTimePricing: _check_dynamic,
}


def pricing_config_errors(details: PricingDetails) -> list[str]:
    check = _CHECKS.get(type(details))
    if check is None:
        raise InvalidPricingConfigError(f"Unsupported pricing details: {type(details).__name__}")
    return check(details)


def ensure_valid_pricing(details: PricingDetails) -> None:
    """
    Write-time gate for an item's pricing configuration.

    Overlapping tiers or windows raise ConflictError, a discount larger than
    its base raises InvalidPricingConfigError and any other problem raises
    ValidationFailedError. All of them carry the collected messages.
    """
    errors = pricing_config_errors(details)
    if not errors:
        return
    overlaps = {ERROR_MESSAGES["tier_overlap"], ERROR_MESSAGES["time_window_overlap"]}
    if overlaps.intersection(errors):
        raise ConflictError("; ".join(errors), {"errors": errors})
    if {_FLAT_DISCOUNT_TOO_HIGH, _PERCENTAGE_DISCOUNT_TOO_HIGH}.intersection(errors):
        raise InvalidPricingConfigError("; ".join(errors), {"errors": errors})
    raise ValidationFailedError("; ".join(errors), {"errors": errors})
