"""
Category management, including cascading soft-delete and tax-change previews.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from catalog_shared.constants import ERROR_MESSAGES
from catalog_shared.errors import DuplicateNameError, NotFoundError
from catalog_shared.logging_config import get_logger
from catalog_shared.models import Category, Item
from catalog_shared.serializers import serialize_category, serialize_page
from catalog_shared.store import CatalogStore, PageRequest

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, store: CatalogStore):
        self.store = store

    def create_category(self, data: dict[str, Any]) -> dict[str, Any]:
        with self.store.session() as session:
            if self.store.find_by_name(session, Category, data["name"]) is not None:
                raise DuplicateNameError(ERROR_MESSAGES["duplicate_category"])
            category = self.store.create(session, Category, data)
            logger.info("Category created", extra={"category_id": category.id})
            return serialize_category(category)

    def get_category(self, category_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            category = self.store.get(session, Category, category_id)
            if category is None:
                raise NotFoundError(ERROR_MESSAGES["category_not_found"])
            return serialize_category(category)

    def list_categories(
        self,
        filters: dict[str, Any],
        page_request: PageRequest | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        with self.store.session() as session:
            page = self.store.list(session, Category, filters, page_request, search=search)
            return serialize_page(page, serialize_category)

    def update_category(self, category_id: int, data: dict[str, Any]) -> dict[str, Any]:
        with self.store.session() as session:
            category = self.store.get(session, Category, category_id, include_inactive=True)
            if category is None:
                raise NotFoundError(ERROR_MESSAGES["category_not_found"])

            new_name = data.get("name")
            if new_name and new_name != category.name:
                existing = self.store.find_by_name(session, Category, new_name)
                if existing is not None and existing.id != category.id:
                    raise DuplicateNameError(ERROR_MESSAGES["duplicate_category"])

            category = self.store.update(session, category, data)
            return serialize_category(category)

    def delete_category(self, category_id: int) -> dict[str, Any]:
        """
        Soft-delete a category, its subcategories and every item under them.

        Rows are only flagged inactive, nothing is removed.
        """
        with self.store.session() as session:
            category = self.store.get(session, Category, category_id, include_inactive=True)
            if category is None:
                raise NotFoundError(ERROR_MESSAGES["category_not_found"])

            self.store.soft_delete(session, category)
            subcategories = self.store.subcategories_of(session, category_id)
            items_deactivated = 0
            for subcategory in subcategories:
                self.store.soft_delete(session, subcategory)
                items_deactivated += self.store.soft_delete_items_of(session, subcategory.id)

            logger.info(
                "Category deleted",
                extra={
                    "category_id": category_id,
                    "subcategories": len(subcategories),
                    "items": items_deactivated,
                },
            )
            return {
                "message": "Category and all dependent entities deleted successfully",
                "subcategories_deactivated": len(subcategories),
                "items_deactivated": items_deactivated,
            }

    def preview_tax_change(self, category_id: int, new_tax_percentage: Decimal) -> dict[str, Any]:
        """Which subcategories and items inherit from this category and would be affected."""
        with self.store.session() as session:
            category = self.store.get(session, Category, category_id)
            if category is None:
                raise NotFoundError(ERROR_MESSAGES["category_not_found"])

            inheriting = [
                sub
                for sub in self.store.subcategories_of(session, category_id)
                if not sub.has_tax_override
            ]
            affected_items = (
                self.store.count(
                    session,
                    Item,
                    {"subcategory_id": [sub.id for sub in inheriting], "is_active": True},
                )
                if inheriting
                else 0
            )
            return {
                "current_tax": float(category.tax_percentage),
                "new_tax": float(new_tax_percentage),
                "affected_subcategories": len(inheriting),
                "affected_items": affected_items,
            }
