"""
SQLAlchemy ORM models for the catalog and booking tables.
"""

from __future__ import annotations

import json
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from .constants import BookingStatus


class JSONBType(TypeDecorator):
    """
    JSONB on PostgreSQL, TEXT with JSON serialization everywhere else.

    Lets the tests run on SQLite while production keeps native JSONB.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        return json.dumps(value, default=_json_default)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        if isinstance(value, str):
            return json.loads(value)
        return value

    @property
    def python_type(self):
        return object


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


JSONB_TYPE = JSONBType()


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Category(TimestampMixin, Base):
    __tablename__ = "catalog_categories"
    __table_args__ = (
        CheckConstraint(
            "tax_percentage >= 0 AND tax_percentage <= 100", name="chk_category_tax_range"
        ),
        Index("ix_category_active", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tax_applicable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tax_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    subcategories: Mapped[list[Subcategory]] = relationship(
        "Subcategory", back_populates="category"
    )


class Subcategory(TimestampMixin, Base):
    """
    Tax override is all-or-nothing: both columns NULL means "inherit from the
    category", both set means "override".
    """

    __tablename__ = "catalog_subcategories"
    __table_args__ = (
        CheckConstraint(
            "(tax_applicable IS NULL AND tax_percentage IS NULL) OR "
            "(tax_applicable IS NOT NULL AND tax_percentage IS NOT NULL)",
            name="chk_subcategory_tax_override_complete",
        ),
        Index("ix_subcategory_category", "category_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("catalog_categories.id"), nullable=False)
    tax_applicable: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    tax_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    category: Mapped[Category] = relationship("Category", back_populates="subcategories")
    items: Mapped[list[Item]] = relationship("Item", back_populates="subcategory")

    @property
    def has_tax_override(self) -> bool:
        return self.tax_applicable is not None and self.tax_percentage is not None


class Item(TimestampMixin, Base):
    """
    Catalog item. Neither tax nor a computed price is ever stored here:
    ``pricing_details`` holds the pricing configuration, and tax comes from the
    subcategory/category chain.
    """

    __tablename__ = "catalog_items"
    __table_args__ = (
        Index("ix_item_subcategory", "subcategory_id", "is_active"),
        Index("ix_item_pricing_type", "pricing_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subcategory_id: Mapped[int] = mapped_column(
        ForeignKey("catalog_subcategories.id"), nullable=False
    )
    pricing_type: Mapped[str] = mapped_column(String(32), nullable=False)
    pricing_details: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    is_bookable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    availability: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    subcategory: Mapped[Subcategory] = relationship("Subcategory", back_populates="items")
    addons: Mapped[list[Addon]] = relationship("Addon", back_populates="item")


class Addon(TimestampMixin, Base):
    __tablename__ = "catalog_addons"
    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_addon_price_positive"),
        Index("ix_addon_item", "item_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    item_id: Mapped[int] = mapped_column(ForeignKey("catalog_items.id"), nullable=False)
    is_mandatory: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    group_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    group_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    item: Mapped[Item] = relationship("Item", back_populates="addons")


class Booking(TimestampMixin, Base):
    __tablename__ = "catalog_bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="chk_booking_time_order"),
        Index("ix_booking_item_date_status", "item_id", "date", "status"),
        Index("ix_booking_user_email", "user_email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("catalog_items.id"), nullable=False)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    user_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    user_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=BookingStatus.PENDING.value
    )
    addon_ids: Mapped[list[int] | None] = mapped_column(JSONB_TYPE, nullable=True)
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    item: Mapped[Item] = relationship("Item")
