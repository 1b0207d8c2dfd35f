"""
Per-application service registry.

``create_app`` builds one ``CatalogServices`` and stores it on
``app.extensions`` so route handlers never touch module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from catalog_shared.config import AppConfig
from catalog_shared.constants import MAX_PAGE_SIZE
from catalog_shared.db import Database
from catalog_shared.services.addon_service import AddonService
from catalog_shared.services.booking_service import BookingService
from catalog_shared.services.category_service import CategoryService
from catalog_shared.services.item_service import ItemService
from catalog_shared.services.subcategory_service import SubcategoryService
from catalog_shared.store import CatalogStore

EXTENSION_KEY = "catalog"


@dataclass
class CatalogServices:
    config: AppConfig
    db: Database
    store: CatalogStore
    categories: CategoryService
    subcategories: SubcategoryService
    items: ItemService
    addons: AddonService
    bookings: BookingService

    @classmethod
    def build(cls, config: AppConfig, db: Database) -> CatalogServices:
        store = CatalogStore(db, max_page_size=config.get_int("max_page_size", MAX_PAGE_SIZE))
        return cls(
            config=config,
            db=db,
            store=store,
            categories=CategoryService(store),
            subcategories=SubcategoryService(store),
            items=ItemService(
                store, revalidate_on_read=config.get_bool("pricing_revalidate_on_read")
            ),
            addons=AddonService(store),
            bookings=BookingService(store),
        )


def get_services() -> CatalogServices:
    return current_app.extensions[EXTENSION_KEY]
