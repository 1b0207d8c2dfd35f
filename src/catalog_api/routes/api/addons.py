"""
Add-ons API.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify

from catalog_api.extensions import get_services
from catalog_api.routes.api.common import json_body, list_params
from catalog_shared.schemas import AddonFilterParams, CreateAddonRequest, UpdateAddonRequest
from catalog_shared.serializers import paginated_response, success_response

addons_bp = Blueprint("addons", __name__)


@addons_bp.post("/addons")
def create_addon():
    payload = CreateAddonRequest(**json_body())
    addon = get_services().addons.create_addon(payload.dict())
    return jsonify(success_response(addon, "Addon created successfully")), HTTPStatus.CREATED


@addons_bp.get("/addons")
def list_addons():
    filters, page_request, _search = list_params(AddonFilterParams)
    result = get_services().addons.list_addons(filters, page_request)
    return jsonify(paginated_response(result))


@addons_bp.get("/addons/<int:addon_id>")
def get_addon(addon_id: int):
    return jsonify(success_response(get_services().addons.get_addon(addon_id)))


@addons_bp.put("/addons/<int:addon_id>")
def update_addon(addon_id: int):
    payload = UpdateAddonRequest(**json_body())
    addon = get_services().addons.update_addon(addon_id, payload.dict(exclude_unset=True))
    return jsonify(success_response(addon, "Addon updated successfully"))


@addons_bp.delete("/addons/<int:addon_id>")
def delete_addon(addon_id: int):
    result = get_services().addons.delete_addon(addon_id)
    return jsonify(success_response(result, result["message"]))
