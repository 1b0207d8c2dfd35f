"""
Serializers for consistent API responses.
"""

from __future__ import annotations

from typing import Any

from catalog_shared.models import Addon, Booking, Category, Item, Subcategory
from catalog_shared.store import Page


def _safe_float(value) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError, ArithmeticError):
        return None


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_category(category: Category) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "image_url": category.image_url,
        "tax_applicable": category.tax_applicable,
        "tax_percentage": _safe_float(category.tax_percentage),
        "is_active": category.is_active,
        "created_at": _iso(category.created_at),
        "updated_at": _iso(category.updated_at),
    }


def serialize_subcategory(subcategory: Subcategory) -> dict[str, Any]:
    return {
        "id": subcategory.id,
        "name": subcategory.name,
        "description": subcategory.description,
        "image_url": subcategory.image_url,
        "category_id": subcategory.category_id,
        "tax_applicable": subcategory.tax_applicable,
        "tax_percentage": _safe_float(subcategory.tax_percentage),
        "is_active": subcategory.is_active,
        "created_at": _iso(subcategory.created_at),
        "updated_at": _iso(subcategory.updated_at),
    }


def serialize_item(item: Item) -> dict[str, Any]:
    """Item payload. Deliberately carries no price and no tax fields."""
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "image_url": item.image_url,
        "subcategory_id": item.subcategory_id,
        "pricing_type": item.pricing_type,
        "pricing_details": item.pricing_details,
        "is_bookable": item.is_bookable,
        "availability": item.availability,
        "is_active": item.is_active,
        "created_at": _iso(item.created_at),
        "updated_at": _iso(item.updated_at),
    }


def serialize_addon(addon: Addon) -> dict[str, Any]:
    return {
        "id": addon.id,
        "name": addon.name,
        "description": addon.description,
        "price": _safe_float(addon.price),
        "item_id": addon.item_id,
        "is_mandatory": addon.is_mandatory,
        "group_id": addon.group_id,
        "group_name": addon.group_name,
        "is_active": addon.is_active,
    }


def serialize_booking(booking: Booking) -> dict[str, Any]:
    return {
        "id": booking.id,
        "item_id": booking.item_id,
        "user_email": booking.user_email,
        "user_name": booking.user_name,
        "user_phone": booking.user_phone,
        "date": _iso(booking.date),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "status": booking.status,
        "addon_ids": booking.addon_ids or [],
        "total_price": _safe_float(booking.total_price),
        "notes": booking.notes,
        "created_at": _iso(booking.created_at),
        "updated_at": _iso(booking.updated_at),
    }


def serialize_page(page: Page, serializer) -> dict[str, Any]:
    return {"data": [serializer(entity) for entity in page.items], "pagination": page.pagination()}


def success_response(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Create a standardized success response."""
    response: dict[str, Any] = {"success": True, "data": data}
    if message:
        response["message"] = message
    return response


def paginated_response(payload: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, **payload}


def error_response(
    error: str, message: str | None = None, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Create a standardized error response."""
    response: dict[str, Any] = {"success": False, "error": error, "message": message or error}
    if details:
        response["details"] = details
    return response
