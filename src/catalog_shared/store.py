"""
Catalog store: the query layer shared by every catalog service.

All methods take an open ``Session`` so callers decide the unit of work; the
store itself never commits.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from .constants import ACTIVE_BOOKING_STATUSES, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .db import Database
from .models import Addon, Base, Booking, Item, Subcategory

ModelT = TypeVar("ModelT", bound=Base)

SORTABLE_FIELDS = {"name", "date", "created_at", "updated_at", "price", "start_time"}


@dataclass
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str = "created_at"
    sort_order: str = "desc"

    def normalized(self, max_limit: int = MAX_PAGE_SIZE) -> PageRequest:
        page = self.page if self.page and self.page > 0 else 1
        limit = self.limit if self.limit and self.limit > 0 else DEFAULT_PAGE_SIZE
        limit = min(limit, max_limit)
        sort_order = "asc" if str(self.sort_order).lower() == "asc" else "desc"
        return PageRequest(page, limit, self.sort_by, sort_order)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: list[Any]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next_page": self.page < self.total_pages,
            "has_prev_page": self.page > 1,
        }


class CatalogStore:
    """CRUD plus the handful of domain queries the core needs."""

    def __init__(self, db: Database, max_page_size: int = MAX_PAGE_SIZE):
        self.db = db
        self.max_page_size = max_page_size

    def session(self):
        return self.db.session()

    @property
    def supports_transactions(self) -> bool:
        return self.db.supports_transactions

    # ---- generic CRUD ---------------------------------------------------

    def get(
        self, session: Session, model: type[ModelT], entity_id: int, include_inactive: bool = False
    ) -> ModelT | None:
        entity = session.get(model, entity_id)
        if entity is None:
            return None
        if not include_inactive and getattr(entity, "is_active", True) is False:
            return None
        return entity

    def exists(self, session: Session, model: type[ModelT], entity_id: int) -> bool:
        return self.get(session, model, entity_id) is not None

    def create(self, session: Session, model: type[ModelT], data: dict[str, Any]) -> ModelT:
        entity = model(**data)
        session.add(entity)
        session.flush()
        session.refresh(entity)
        return entity

    def update(self, session: Session, entity: ModelT, data: dict[str, Any]) -> ModelT:
        for field, value in data.items():
            setattr(entity, field, value)
        session.add(entity)
        session.flush()
        session.refresh(entity)
        return entity

    def soft_delete(self, session: Session, entity: ModelT) -> ModelT:
        entity.is_active = False
        session.add(entity)
        session.flush()
        session.refresh(entity)
        return entity

    def list(
        self,
        session: Session,
        model: type[ModelT],
        filters: dict[str, Any] | None = None,
        page_request: PageRequest | None = None,
        search: str | None = None,
    ) -> Page:
        page_request = (page_request or PageRequest()).normalized(self.max_page_size)
        query = self._filtered(model, filters or {}, search)

        total = session.execute(
            select(func.count()).select_from(query.order_by(None).subquery())
        ).scalar_one()

        sort_column = self._sort_column(model, page_request.sort_by)
        ordering = sort_column.asc() if page_request.sort_order == "asc" else sort_column.desc()
        rows = (
            session.execute(
                query.order_by(ordering, model.id.asc())
                .offset(page_request.offset)
                .limit(page_request.limit)
            )
            .scalars()
            .all()
        )
        return Page(list(rows), page_request.page, page_request.limit, total)

    def count(self, session: Session, model: type[ModelT], filters: dict[str, Any] | None = None):
        query = self._filtered(model, filters or {}, None)
        return session.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar_one()

    # ---- domain queries -------------------------------------------------

    def find_by_name(self, session: Session, model: type[ModelT], name: str) -> ModelT | None:
        return session.execute(
            select(model).where(func.lower(model.name) == name.strip().lower())
        ).scalar_one_or_none()

    def subcategories_of(
        self, session: Session, category_id: int, include_inactive: bool = False
    ) -> Sequence[Subcategory]:
        query = select(Subcategory).where(Subcategory.category_id == category_id)
        if not include_inactive:
            query = query.where(Subcategory.is_active.is_(True))
        return session.execute(query.order_by(Subcategory.id)).scalars().all()

    def items_of(
        self, session: Session, subcategory_id: int, include_inactive: bool = False
    ) -> Sequence[Item]:
        query = select(Item).where(Item.subcategory_id == subcategory_id)
        if not include_inactive:
            query = query.where(Item.is_active.is_(True))
        return session.execute(query.order_by(Item.id)).scalars().all()

    def soft_delete_items_of(self, session: Session, subcategory_id: int) -> int:
        items = self.items_of(session, subcategory_id)
        for item in items:
            item.is_active = False
        session.flush()
        return len(items)

    def addons_of(self, session: Session, item_id: int) -> Sequence[Addon]:
        return (
            session.execute(
                select(Addon)
                .where(Addon.item_id == item_id, Addon.is_active.is_(True))
                .order_by(Addon.id)
            )
            .scalars()
            .all()
        )

    def addons_by_ids(self, session: Session, addon_ids: Sequence[int]) -> Sequence[Addon]:
        if not addon_ids:
            return []
        return (
            session.execute(
                select(Addon).where(Addon.id.in_(list(addon_ids)), Addon.is_active.is_(True))
            )
            .scalars()
            .all()
        )

    def bookings_on(self, session: Session, item_id: int, on_date: date) -> Sequence[Booking]:
        """Bookings that currently hold a slot for ``item_id`` on ``on_date``."""
        return (
            session.execute(
                select(Booking)
                .where(
                    Booking.item_id == item_id,
                    Booking.date == on_date,
                    Booking.status.in_([status.value for status in ACTIVE_BOOKING_STATUSES]),
                )
                .order_by(Booking.start_time)
            )
            .scalars()
            .all()
        )

    def find_conflicting_bookings(
        self,
        session: Session,
        item_id: int,
        on_date: date,
        start_time: str,
        end_time: str,
        exclude_id: int | None = None,
    ) -> Sequence[Booking]:
        """
        Active bookings whose interval overlaps ``[start_time, end_time]``.

        Uses the inclusive predicate ``existing.start <= end AND
        existing.end >= start``, so back-to-back bookings conflict. HH:MM strings
        compare correctly as text because they are zero-padded.
        """
        query = select(Booking).where(
            Booking.item_id == item_id,
            Booking.date == on_date,
            Booking.status.in_([status.value for status in ACTIVE_BOOKING_STATUSES]),
            Booking.start_time <= end_time,
            Booking.end_time >= start_time,
        )
        if exclude_id is not None:
            query = query.where(Booking.id != exclude_id)
        return session.execute(query).scalars().all()

    # ---- helpers --------------------------------------------------------

    @staticmethod
    def _sort_column(model: type[ModelT], sort_by: str | None):
        if sort_by in SORTABLE_FIELDS and hasattr(model, sort_by):
            return getattr(model, sort_by)
        return model.created_at

    @staticmethod
    def _filtered(model: type[ModelT], filters: dict[str, Any], search: str | None) -> Select:
        query = select(model)
        for field, value in filters.items():
            if value is None:
                continue
            if field == "category_id" and model is Item:
                query = query.join(Subcategory, Item.subcategory_id == Subcategory.id).where(
                    Subcategory.category_id == value
                )
            elif field == "date_from" and model is Booking:
                query = query.where(Booking.date >= value)
            elif field == "date_to" and model is Booking:
                query = query.where(Booking.date <= value)
            elif hasattr(model, field):
                column = getattr(model, field)
                if isinstance(value, (list, tuple, set, frozenset)):
                    query = query.where(column.in_(list(value)))
                else:
                    query = query.where(column == value)
        if search:
            pattern = f"%{search.strip()}%"
            conditions = [model.name.ilike(pattern)]
            if hasattr(model, "description"):
                conditions.append(model.description.ilike(pattern))
            query = query.where(or_(*conditions))
        return query
