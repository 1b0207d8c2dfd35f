"""
Subcategories API.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify

from catalog_api.extensions import get_services
from catalog_api.routes.api.common import json_body, list_params
from catalog_shared.schemas import (
    CreateSubcategoryRequest,
    SubcategoryFilterParams,
    UpdateSubcategoryRequest,
)
from catalog_shared.serializers import paginated_response, success_response

subcategories_bp = Blueprint("subcategories", __name__)


@subcategories_bp.post("/subcategories")
def create_subcategory():
    payload = CreateSubcategoryRequest(**json_body())
    subcategory = get_services().subcategories.create_subcategory(payload.dict())
    return jsonify(
        success_response(subcategory, "Subcategory created successfully")
    ), HTTPStatus.CREATED


@subcategories_bp.get("/subcategories")
def list_subcategories():
    filters, page_request, search = list_params(SubcategoryFilterParams)
    result = get_services().subcategories.list_subcategories(filters, page_request, search)
    return jsonify(paginated_response(result))


@subcategories_bp.get("/subcategories/<int:subcategory_id>")
def get_subcategory(subcategory_id: int):
    return jsonify(
        success_response(get_services().subcategories.get_subcategory(subcategory_id))
    )


@subcategories_bp.put("/subcategories/<int:subcategory_id>")
def update_subcategory(subcategory_id: int):
    payload = UpdateSubcategoryRequest(**json_body())
    subcategory = get_services().subcategories.update_subcategory(
        subcategory_id, payload.dict(exclude_unset=True)
    )
    return jsonify(success_response(subcategory, "Subcategory updated successfully"))


@subcategories_bp.delete("/subcategories/<int:subcategory_id>")
def delete_subcategory(subcategory_id: int):
    result = get_services().subcategories.delete_subcategory(subcategory_id)
    return jsonify(success_response(result, result["message"]))
