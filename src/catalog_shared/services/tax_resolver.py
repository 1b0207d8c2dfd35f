"""
Tax resolution along the item -> subcategory -> category chain.

Items never store tax. A subcategory that sets both override fields wins;
otherwise the category's values apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from catalog_shared.constants import ERROR_MESSAGES, TaxSource
from catalog_shared.errors import NotFoundError
from catalog_shared.logging_config import get_logger
from catalog_shared.models import Category, Item, Subcategory

logger = get_logger(__name__)


@dataclass(frozen=True)
class TaxInfo:
    tax_applicable: bool
    tax_percentage: Decimal
    source: TaxSource

    def to_dict(self) -> dict[str, Any]:
        return {
            "tax_applicable": self.tax_applicable,
            "tax_percentage": float(self.tax_percentage),
            "source": self.source.value,
        }


NO_TAX = TaxInfo(tax_applicable=False, tax_percentage=Decimal("0"), source=TaxSource.NONE)


def _subcategory_override(subcategory: Subcategory) -> TaxInfo | None:
    if subcategory.tax_applicable is None or subcategory.tax_percentage is None:
        return None
    return TaxInfo(
        tax_applicable=bool(subcategory.tax_applicable),
        tax_percentage=Decimal(str(subcategory.tax_percentage)),
        source=TaxSource.SUBCATEGORY,
    )


def resolve_tax_from_loaded(subcategory: Subcategory, category: Category) -> TaxInfo:
    """Resolve tax from relations the caller already loaded. No I/O, no fallback."""
    override = _subcategory_override(subcategory)
    if override is not None:
        return override
    return TaxInfo(
        tax_applicable=bool(category.tax_applicable),
        tax_percentage=Decimal(str(category.tax_percentage)),
        source=TaxSource.CATEGORY,
    )


def resolve_tax(session: Session, item: Item, strict: bool = False) -> TaxInfo:
    """
    Resolve the effective tax for ``item``.

    A missing subcategory or category is logged and resolves to ``NO_TAX``.
    With ``strict=True`` a missing subcategory raises NotFoundError instead.
    """
    subcategory = session.get(Subcategory, item.subcategory_id)
    if subcategory is None:
        if strict:
            raise NotFoundError(ERROR_MESSAGES["subcategory_not_found"])
        logger.error(
            "Error resolving tax: subcategory not found",
            extra={"item_id": item.id, "subcategory_id": item.subcategory_id},
        )
        return NO_TAX

    override = _subcategory_override(subcategory)
    if override is not None:
        return override

    category = session.get(Category, subcategory.category_id)
    if category is None:
        logger.error(
            "Error resolving tax: category not found",
            extra={"item_id": item.id, "category_id": subcategory.category_id},
        )
        return NO_TAX

    return resolve_tax_from_loaded(subcategory, category)


def calculate_tax_amount(amount: Decimal, tax_info: TaxInfo) -> Decimal:
    """Tax owed on ``amount``. No rounding is applied here."""
    if not tax_info.tax_applicable:
        return Decimal("0")
    return Decimal(str(amount)) * tax_info.tax_percentage / Decimal("100")
