# tests/conftest.py
from decimal import Decimal

import pytest

from catalog_api.app import create_app
from catalog_shared.config import load_config
from catalog_shared.db import Database
from catalog_shared.models import Base
from catalog_shared.services.addon_service import AddonService
from catalog_shared.services.booking_service import BookingService
from catalog_shared.services.category_service import CategoryService
from catalog_shared.services.item_service import ItemService
from catalog_shared.services.subcategory_service import SubcategoryService
from catalog_shared.store import CatalogStore

MEMORY_URL = "sqlite:///:memory:"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]
ROOM_AVAILABILITY = {
    "days": WEEKDAYS,
    "time_slots": [
        {"start_time": "09:00", "end_time": "10:00"},
        {"start_time": "10:00", "end_time": "11:00"},
        {"start_time": "14:00", "end_time": "16:00"},
    ],
}


@pytest.fixture
def db():
    database = Database(MEMORY_URL)
    database.connect()
    database.create_schema(Base.metadata)
    yield database
    database.close()


@pytest.fixture
def store(db):
    return CatalogStore(db)


class CatalogFactory:
    """Builds a small catalog through the services, the way the API would."""

    def __init__(self, store: CatalogStore):
        self.categories = CategoryService(store)
        self.subcategories = SubcategoryService(store)
        self.items = ItemService(store)
        self.addons = AddonService(store)
        self._names = 0

    def _name(self, prefix):
        self._names += 1
        return f"{prefix} {self._names}"

    def category(self, **overrides):
        data = {
            "name": self._name("Category"),
            "tax_applicable": True,
            "tax_percentage": Decimal("18"),
        }
        data.update(overrides)
        return self.categories.create_category(data)

    def subcategory(self, category_id=None, **overrides):
        if category_id is None:
            category_id = self.category()["id"]
        data = {"name": self._name("Subcategory"), "category_id": category_id}
        data.update(overrides)
        return self.subcategories.create_subcategory(data)

    def item(self, subcategory_id=None, **overrides):
        if subcategory_id is None:
            subcategory_id = self.subcategory()["id"]
        data = {
            "name": self._name("Item"),
            "subcategory_id": subcategory_id,
            "pricing_type": "static",
            "pricing_details": {"static_price": 50},
        }
        data.update(overrides)
        return self.items.create_item(data)

    def bookable_item(self, subcategory_id=None, **overrides):
        overrides.setdefault("is_bookable", True)
        overrides.setdefault("availability", ROOM_AVAILABILITY)
        return self.item(subcategory_id, **overrides)

    def addon(self, item_id, **overrides):
        data = {"name": self._name("Addon"), "price": Decimal("5"), "item_id": item_id}
        data.update(overrides)
        return self.addons.create_addon(data)


@pytest.fixture
def factory(store):
    return CatalogFactory(store)


@pytest.fixture
def booking_service(store):
    return BookingService(store)


@pytest.fixture
def app():
    config = load_config(
        "catalog-test",
        database_url=MEMORY_URL,
        db_supports_transactions=True,
        log_level="WARNING",
        debug_mode=False,
    )
    return create_app(config)


@pytest.fixture
def client(app):
    return app.test_client()
