from decimal import Decimal

import pytest

from catalog_shared.constants import TaxSource
from catalog_shared.errors import NotFoundError
from catalog_shared.models import Category, Item, Subcategory
from catalog_shared.services.tax_resolver import (
    NO_TAX,
    TaxInfo,
    calculate_tax_amount,
    resolve_tax,
    resolve_tax_from_loaded,
)


def test_subcategory_override_wins(db, factory):
    subcategory = factory.subcategory(tax_applicable=True, tax_percentage=Decimal("8"))
    item = factory.item(subcategory["id"])

    with db.session() as session:
        tax = resolve_tax(session, session.get(Item, item["id"]))

    assert tax == TaxInfo(True, Decimal("8"), TaxSource.SUBCATEGORY)


def test_item_inherits_category_tax(db, factory):
    category = factory.category(tax_percentage=Decimal("18"))
    subcategory = factory.subcategory(category["id"])
    item = factory.item(subcategory["id"])

    with db.session() as session:
        tax = resolve_tax(session, session.get(Item, item["id"]))

    assert tax.tax_applicable is True
    assert tax.tax_percentage == Decimal("18")
    assert tax.source is TaxSource.CATEGORY


def test_override_can_switch_tax_off(db, factory):
    subcategory = factory.subcategory(tax_applicable=False, tax_percentage=Decimal("0"))
    item = factory.item(subcategory["id"])

    with db.session() as session:
        tax = resolve_tax(session, session.get(Item, item["id"]))

    assert tax.tax_applicable is False
    assert tax.source is TaxSource.SUBCATEGORY


def test_missing_subcategory_resolves_to_no_tax(db):
    orphan = Item(id=99, name="Orphan", subcategory_id=12345, pricing_type="static")

    with db.session() as session:
        assert resolve_tax(session, orphan) == NO_TAX


def test_missing_subcategory_raises_in_strict_mode(db):
    orphan = Item(id=99, name="Orphan", subcategory_id=12345, pricing_type="static")

    with db.session() as session:
        with pytest.raises(NotFoundError):
            resolve_tax(session, orphan, strict=True)


def test_tax_amount_only_when_applicable():
    applicable = TaxInfo(True, Decimal("18"), TaxSource.CATEGORY)
    not_applicable = TaxInfo(False, Decimal("18"), TaxSource.CATEGORY)

    assert calculate_tax_amount(Decimal("100"), applicable) == Decimal("18")
    assert calculate_tax_amount(Decimal("100"), not_applicable) == Decimal("0")


def test_loaded_relations_prefer_subcategory_override():
    category = Category(name="Rooms", tax_applicable=True, tax_percentage=Decimal("18"))
    subcategory = Subcategory(name="Suites", tax_applicable=False, tax_percentage=Decimal("0"))

    tax = resolve_tax_from_loaded(subcategory, category)

    assert tax == TaxInfo(False, Decimal("0"), TaxSource.SUBCATEGORY)


def test_loaded_relations_inherit_from_category():
    category = Category(name="Rooms", tax_applicable=True, tax_percentage=Decimal("18"))
    subcategory = Subcategory(name="Suites")

    tax = resolve_tax_from_loaded(subcategory, category)

    assert tax == TaxInfo(True, Decimal("18"), TaxSource.CATEGORY)
