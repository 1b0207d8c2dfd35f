"""
Booking commit strategies.

Which one runs is decided once, when the application is built, from
``Database.supports_transactions``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from catalog_shared.constants import ERROR_MESSAGES
from catalog_shared.errors import BookingConflictError
from catalog_shared.logging_config import get_logger
from catalog_shared.models import Booking
from catalog_shared.store import CatalogStore

logger = get_logger(__name__)


class BookingCommitter(ABC):
    """Re-checks for conflicts and inserts the booking."""

    def __init__(self, store: CatalogStore):
        self.store = store

    @abstractmethod
    def commit(self, data: dict[str, Any]) -> Booking:
        raise NotImplementedError

    def _ensure_no_conflict(self, session, data: dict[str, Any]) -> None:
        conflicts = self.store.find_conflicting_bookings(
            session, data["item_id"], data["date"], data["start_time"], data["end_time"]
        )
        if conflicts:
            raise BookingConflictError(
                ERROR_MESSAGES["booking_conflict"],
                {"conflicting_booking_ids": [booking.id for booking in conflicts]},
            )


class TransactionalBookingCommitter(BookingCommitter):
    """
    Conflict re-check and insert inside one transaction.

    Any error rolls the transaction back and is re-raised unchanged.
    """

    def commit(self, data: dict[str, Any]) -> Booking:
        with self.store.session() as session:
            self._ensure_no_conflict(session, data)
            booking = self.store.create(session, Booking, data)
        logger.info(
            "Booking committed in transaction",
            extra={"booking_id": booking.id, "item_id": booking.item_id},
        )
        return booking


class OptimisticBookingCommitter(BookingCommitter):
    """
    Conflict re-check and insert as two separate units of work.

    Used when the store cannot run multi-statement transactions. A concurrent
    insert between the two steps is not detected; a storage-level uniqueness
    constraint is the only full protection.
    """

    def commit(self, data: dict[str, Any]) -> Booking:
        with self.store.session() as session:
            self._ensure_no_conflict(session, data)

        with self.store.session() as session:
            booking = self.store.create(session, Booking, data)
        logger.info(
            "Booking committed optimistically",
            extra={"booking_id": booking.id, "item_id": booking.item_id},
        )
        return booking


def build_committer(store: CatalogStore) -> BookingCommitter:
    if store.supports_transactions:
        return TransactionalBookingCommitter(store)
    logger.warning("Store has no transaction support, using optimistic booking commits")
    return OptimisticBookingCommitter(store)
