"""
Items API - items, their price breakdown and their add-ons.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from catalog_api.extensions import get_services
from catalog_api.routes.api.common import json_body, list_params
from catalog_shared.schemas import (
    CreateItemRequest,
    ItemFilterParams,
    PriceQueryParams,
    UpdateItemRequest,
)
from catalog_shared.serializers import paginated_response, success_response

items_bp = Blueprint("items", __name__)


@items_bp.post("/items")
def create_item():
    """
    Create an item.

    The pricing configuration is validated before anything is stored.
    """
    payload = CreateItemRequest(**json_body())
    item = get_services().items.create_item(payload.dict())
    return jsonify(success_response(item, "Item created successfully")), HTTPStatus.CREATED


@items_bp.get("/items")
def list_items():
    """
    List items.

    Query: subcategory_id, category_id, pricing_type, is_bookable, is_active,
    search, page, limit, sort_by, sort_order
    """
    filters, page_request, search = list_params(ItemFilterParams)
    result = get_services().items.list_items(filters, page_request, search)
    return jsonify(paginated_response(result))


@items_bp.get("/items/<int:item_id>")
def get_item(item_id: int):
    return jsonify(success_response(get_services().items.get_item(item_id)))


@items_bp.put("/items/<int:item_id>")
def update_item(item_id: int):
    payload = UpdateItemRequest(**json_body())
    item = get_services().items.update_item(item_id, payload.dict(exclude_unset=True))
    return jsonify(success_response(item, "Item updated successfully"))


@items_bp.delete("/items/<int:item_id>")
def delete_item(item_id: int):
    result = get_services().items.delete_item(item_id)
    return jsonify(success_response(result, result["message"]))


@items_bp.get("/items/<int:item_id>/price")
def get_item_price(item_id: int):
    """
    Price breakdown.

    Query: quantity (default 1), addon_ids (comma separated), at (ISO datetime)
    """
    query = PriceQueryParams(**request.args.to_dict())
    price = get_services().items.get_item_price(
        item_id, quantity=query.quantity, addon_ids=query.addon_ids, at=query.at
    )
    return jsonify(success_response(price))


@items_bp.get("/items/<int:item_id>/addons")
def get_item_addons(item_id: int):
    return jsonify(success_response(get_services().items.get_item_addons(item_id)))
