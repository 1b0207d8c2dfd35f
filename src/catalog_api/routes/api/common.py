"""Request parsing helpers shared by the API blueprints."""

from __future__ import annotations

from typing import Any

from flask import request
from pydantic import BaseModel

from catalog_api.extensions import get_services
from catalog_shared.constants import DEFAULT_PAGE_SIZE
from catalog_shared.schemas import ListQueryParams
from catalog_shared.store import PageRequest


def json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def list_params(
    filter_schema: type[BaseModel],
) -> tuple[dict[str, Any], PageRequest, str | None]:
    """Split query args into entity filters, a page request and a search term."""
    args = request.args.to_dict()
    query = ListQueryParams(**args)
    filters = filter_schema(**args).dict(exclude_none=True)
    default_limit = get_services().config.get_int("default_page_size", DEFAULT_PAGE_SIZE)
    page_request = PageRequest(
        page=query.page,
        limit=query.limit or default_limit,
        sort_by=query.sort_by,
        sort_order=query.sort_order,
    )
    return filters, page_request, query.search
