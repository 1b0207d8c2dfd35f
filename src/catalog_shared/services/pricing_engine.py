"""
Price calculation for catalog items.

Prices are never stored. Every request recomputes the base price from the
item's pricing configuration, adds add-ons, then applies the resolved tax.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Sequence

from catalog_shared.constants import DAYS_OF_WEEK, ERROR_MESSAGES, DiscountType
from catalog_shared.errors import (
    ConflictError,
    InvalidPricingConfigError,
    NoMatchingTierError,
    OutsideWindowError,
    ValidationFailedError,
)
from catalog_shared.logging_config import get_logger
from catalog_shared.models import Item
from catalog_shared.pricing import (
    ComplimentaryPricing,
    DiscountedPricing,
    DynamicTimePricing,
    PricingDetails,
    StaticPricing,
    TieredPricing,
    parse_pricing_details,
)
from catalog_shared.services.pricing_validation import (
    validate_tiered_pricing,
    validate_time_windows,
)
from catalog_shared.services.tax_resolver import TaxInfo, calculate_tax_amount

logger = get_logger(__name__)


@dataclass
class PriceContext:
    quantity: int = 1
    current_time: datetime | None = None
    selected_addon_prices: Sequence[Decimal] = field(default_factory=tuple)


@dataclass(frozen=True)
class BasePrice:
    base_price: Decimal
    applied_rule: str
    discount_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class PriceBreakdown:
    pricing_type: str
    base_price: Decimal
    applied_rule: str
    discount_amount: Decimal
    addons_total: Decimal
    subtotal: Decimal
    tax_info: TaxInfo
    tax_amount: Decimal
    final_price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "pricing_type": self.pricing_type,
            "base_price": float(self.base_price),
            "applied_rule": self.applied_rule,
            "discount_amount": float(self.discount_amount),
            "addons_total": float(self.addons_total),
            "subtotal": float(self.subtotal),
            "tax_info": self.tax_info.to_dict(),
            "tax_amount": float(self.tax_amount),
            "final_price": float(self.final_price),
        }


def _fmt(value: Decimal) -> str:
    return format(value.normalize(), "f") if value == value.to_integral() else str(value)


def _static_price(details: StaticPricing, context: PriceContext) -> BasePrice:
    return BasePrice(details.static_price, f"Static price: {_fmt(details.static_price)}")


def _tiered_price(details: TieredPricing, context: PriceContext) -> BasePrice:
    if not details.tiers:
        raise NoMatchingTierError("No tiers defined for tiered pricing")

    for tier in details.tiers:
        if tier.min_quantity <= context.quantity <= tier.max_quantity:
            return BasePrice(
                tier.price_per_unit,
                f"Tier: {tier.min_quantity}-{tier.max_quantity} units @ "
                f"{_fmt(tier.price_per_unit)} per unit",
            )

    raise NoMatchingTierError(
        f"No tier found for quantity {context.quantity}", {"quantity": context.quantity}
    )


def _complimentary_price(details: ComplimentaryPricing, context: PriceContext) -> BasePrice:
    return BasePrice(Decimal("0"), "Complimentary (Free)")


def _discounted_price(details: DiscountedPricing, context: PriceContext) -> BasePrice:
    base = details.base_price
    if details.discount_type == DiscountType.FLAT:
        discount_amount = details.discount_value
        suffix = ""
    else:
        discount_amount = base * details.discount_value / Decimal("100")
        suffix = "%"
    final = max(Decimal("0"), base - discount_amount)
    return BasePrice(
        final,
        f"Base: {_fmt(base)}, Discount: {_fmt(details.discount_value)}{suffix} = {_fmt(final)}",
        discount_amount,
    )


def _dynamic_time_price(details: DynamicTimePricing, context: PriceContext) -> BasePrice:
    if not details.time_windows:
        raise OutsideWindowError("No time windows defined for dynamic pricing")

    now = context.current_time or datetime.now()
    current_day = DAYS_OF_WEEK[now.weekday()]
    current_time = now.strftime("%H:%M")

    for window in details.time_windows:
        if (
            window.day_of_week.lower() == current_day
            and window.start_time <= current_time <= window.end_time
        ):
            return BasePrice(
                window.price,
                f"{window.day_of_week} {window.start_time}-{window.end_time}: "
                f"{_fmt(window.price)}",
            )

    if details.unavailable_outside_windows:
        raise OutsideWindowError(
            "Item is unavailable outside defined time windows",
            {"day_of_week": current_day, "time": current_time},
        )

    # Outside every window the first configured window's price applies
    return BasePrice(details.time_windows[0].price, "Default price (outside time windows)")


_STRATEGIES: dict[type, Callable[[Any, PriceContext], BasePrice]] = {
    StaticPricing: _static_price,
    TieredPricing: _tiered_price,
    ComplimentaryPricing: _complimentary_price,
    DiscountedPricing: _discounted_price,
    DynamicTimePricing: _dynamic_time_price,
}


def _revalidate(details: PricingDetails) -> None:
    if isinstance(details, TieredPricing) and not validate_tiered_pricing(details.tiers):
        raise ConflictError(ERROR_MESSAGES["tier_overlap"])
    if isinstance(details, DynamicTimePricing) and not validate_time_windows(
        details.time_windows
    ):
        raise ConflictError(ERROR_MESSAGES["time_window_overlap"])


def calculate_base_price(details: PricingDetails, context: PriceContext) -> BasePrice:
    strategy = _STRATEGIES.get(type(details))
    if strategy is None:
        raise InvalidPricingConfigError(f"Unsupported pricing details: {type(details).__name__}")
    return strategy(details, context)


def calculate_price(
    item: Item,
    tax_info: TaxInfo,
    context: PriceContext | None = None,
    revalidate: bool = False,
) -> PriceBreakdown:
    """
    Compute the full price breakdown for one item.

    Quantity multiplies the base price only; add-on prices are added once.
    Strategy failures (no tier, outside window, bad config) propagate.
    ``revalidate`` re-runs the tier/window overlap checks before pricing.
    """
    context = context or PriceContext()
    details = parse_pricing_details(item.pricing_type, item.pricing_details)

    # Tiered pricing reports a bad quantity as "no matching tier"
    if context.quantity < 1 and not isinstance(details, TieredPricing):
        raise ValidationFailedError(
            f"Quantity must be at least 1, got {context.quantity}", {"quantity": context.quantity}
        )
    if revalidate:
        _revalidate(details)

    base = calculate_base_price(details, context)

    addons_total = sum((Decimal(str(p)) for p in context.selected_addon_prices), Decimal("0"))
    subtotal = base.base_price * context.quantity + addons_total
    tax_amount = calculate_tax_amount(subtotal, tax_info)
    final_price = subtotal + tax_amount

    logger.debug(
        "Price calculated",
        extra={
            "item_id": item.id,
            "pricing_type": item.pricing_type,
            "quantity": context.quantity,
            "final_price": str(final_price),
        },
    )

    return PriceBreakdown(
        pricing_type=item.pricing_type,
        base_price=base.base_price,
        applied_rule=base.applied_rule,
        discount_amount=base.discount_amount,
        addons_total=addons_total,
        subtotal=subtotal,
        tax_info=tax_info,
        tax_amount=tax_amount,
        final_price=final_price,
    )
