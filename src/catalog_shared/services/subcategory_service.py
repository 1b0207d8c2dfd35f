"""Subcategory management."""

from __future__ import annotations

from typing import Any

from catalog_shared.constants import ERROR_MESSAGES
from catalog_shared.errors import NotFoundError, ValidationFailedError
from catalog_shared.logging_config import get_logger
from catalog_shared.models import Category, Subcategory
from catalog_shared.serializers import serialize_page, serialize_subcategory
from catalog_shared.store import CatalogStore, PageRequest

logger = get_logger(__name__)


def _check_tax_override(tax_applicable, tax_percentage) -> None:
    if (tax_applicable is None) != (tax_percentage is None):
        raise ValidationFailedError(
            "tax_applicable and tax_percentage must be provided together or not at all"
        )


class SubcategoryService:
    def __init__(self, store: CatalogStore):
        self.store = store

    def create_subcategory(self, data: dict[str, Any]) -> dict[str, Any]:
        _check_tax_override(data.get("tax_applicable"), data.get("tax_percentage"))
        with self.store.session() as session:
            if not self.store.exists(session, Category, data["category_id"]):
                raise NotFoundError(ERROR_MESSAGES["category_not_found"])
            subcategory = self.store.create(session, Subcategory, data)
            logger.info("Subcategory created", extra={"subcategory_id": subcategory.id})
            return serialize_subcategory(subcategory)

    def get_subcategory(self, subcategory_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            subcategory = self.store.get(session, Subcategory, subcategory_id)
            if subcategory is None:
                raise NotFoundError(ERROR_MESSAGES["subcategory_not_found"])
            return serialize_subcategory(subcategory)

    def list_subcategories(
        self,
        filters: dict[str, Any],
        page_request: PageRequest | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        with self.store.session() as session:
            page = self.store.list(session, Subcategory, filters, page_request, search=search)
            return serialize_page(page, serialize_subcategory)

    def update_subcategory(self, subcategory_id: int, data: dict[str, Any]) -> dict[str, Any]:
        with self.store.session() as session:
            subcategory = self.store.get(
                session, Subcategory, subcategory_id, include_inactive=True
            )
            if subcategory is None:
                raise NotFoundError(ERROR_MESSAGES["subcategory_not_found"])

            if data.get("category_id") and not self.store.exists(
                session, Category, data["category_id"]
            ):
                raise NotFoundError(ERROR_MESSAGES["category_not_found"])

            # A partial update must leave the override complete or absent
            if "tax_applicable" in data or "tax_percentage" in data:
                _check_tax_override(
                    data.get("tax_applicable", subcategory.tax_applicable),
                    data.get("tax_percentage", subcategory.tax_percentage),
                )

            subcategory = self.store.update(session, subcategory, data)
            return serialize_subcategory(subcategory)

    def delete_subcategory(self, subcategory_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            subcategory = self.store.get(
                session, Subcategory, subcategory_id, include_inactive=True
            )
            if subcategory is None:
                raise NotFoundError(ERROR_MESSAGES["subcategory_not_found"])

            self.store.soft_delete(session, subcategory)
            items_deactivated = self.store.soft_delete_items_of(session, subcategory_id)
            logger.info(
                "Subcategory deleted",
                extra={"subcategory_id": subcategory_id, "items": items_deactivated},
            )
            return {
                "message": "Subcategory and all dependent items deleted successfully",
                "items_deactivated": items_deactivated,
            }
