"""
Categories API - top level of the catalog hierarchy.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from catalog_api.extensions import get_services
from catalog_api.routes.api.common import json_body, list_params
from catalog_shared.schemas import (
    CategoryFilterParams,
    CreateCategoryRequest,
    TaxImpactQueryParams,
    UpdateCategoryRequest,
)
from catalog_shared.serializers import paginated_response, success_response

categories_bp = Blueprint("categories", __name__)


@categories_bp.post("/categories")
def create_category():
    payload = CreateCategoryRequest(**json_body())
    category = get_services().categories.create_category(payload.dict())
    return jsonify(
        success_response(category, "Category created successfully")
    ), HTTPStatus.CREATED


@categories_bp.get("/categories")
def list_categories():
    """
    List categories.

    Query: page, limit, sort_by, sort_order, search, is_active (default true)
    """
    filters, page_request, search = list_params(CategoryFilterParams)
    result = get_services().categories.list_categories(filters, page_request, search)
    return jsonify(paginated_response(result))


@categories_bp.get("/categories/<int:category_id>")
def get_category(category_id: int):
    return jsonify(success_response(get_services().categories.get_category(category_id)))


@categories_bp.put("/categories/<int:category_id>")
def update_category(category_id: int):
    payload = UpdateCategoryRequest(**json_body())
    category = get_services().categories.update_category(
        category_id, payload.dict(exclude_unset=True)
    )
    return jsonify(success_response(category, "Category updated successfully"))


@categories_bp.delete("/categories/<int:category_id>")
def delete_category(category_id: int):
    """Soft-delete the category together with its subcategories and items."""
    result = get_services().categories.delete_category(category_id)
    return jsonify(success_response(result, result["message"]))


@categories_bp.get("/categories/<int:category_id>/tax-impact")
def category_tax_impact(category_id: int):
    query = TaxImpactQueryParams(**request.args.to_dict())
    impact = get_services().categories.preview_tax_change(category_id, query.tax_percentage)
    return jsonify(success_response(impact))
