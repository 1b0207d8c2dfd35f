"""Add-on management."""

from __future__ import annotations

from typing import Any

from catalog_shared.constants import ERROR_MESSAGES
from catalog_shared.errors import NotFoundError
from catalog_shared.logging_config import get_logger
from catalog_shared.models import Addon, Item
from catalog_shared.serializers import serialize_addon, serialize_page
from catalog_shared.store import CatalogStore, PageRequest

logger = get_logger(__name__)


class AddonService:
    def __init__(self, store: CatalogStore):
        self.store = store

    def create_addon(self, data: dict[str, Any]) -> dict[str, Any]:
        with self.store.session() as session:
            if not self.store.exists(session, Item, data["item_id"]):
                raise NotFoundError(ERROR_MESSAGES["item_not_found"])
            addon = self.store.create(session, Addon, data)
            logger.info("Addon created", extra={"addon_id": addon.id, "item_id": addon.item_id})
            return serialize_addon(addon)

    def get_addon(self, addon_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            addon = self.store.get(session, Addon, addon_id)
            if addon is None:
                raise NotFoundError(ERROR_MESSAGES["addon_not_found"])
            return serialize_addon(addon)

    def list_addons(
        self, filters: dict[str, Any], page_request: PageRequest | None = None
    ) -> dict[str, Any]:
        with self.store.session() as session:
            page = self.store.list(session, Addon, filters, page_request)
            return serialize_page(page, serialize_addon)

    def update_addon(self, addon_id: int, data: dict[str, Any]) -> dict[str, Any]:
        with self.store.session() as session:
            addon = self.store.get(session, Addon, addon_id, include_inactive=True)
            if addon is None:
                raise NotFoundError(ERROR_MESSAGES["addon_not_found"])
            if data.get("item_id") and not self.store.exists(session, Item, data["item_id"]):
                raise NotFoundError(ERROR_MESSAGES["item_not_found"])
            addon = self.store.update(session, addon, data)
            return serialize_addon(addon)

    def delete_addon(self, addon_id: int) -> dict[str, Any]:
        with self.store.session() as session:
            addon = self.store.get(session, Addon, addon_id, include_inactive=True)
            if addon is None:
                raise NotFoundError(ERROR_MESSAGES["addon_not_found"])
            self.store.soft_delete(session, addon)
            return {"message": "Addon deleted successfully"}
