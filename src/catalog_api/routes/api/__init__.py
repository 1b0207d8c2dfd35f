"""
Catalog API - Modular Blueprint Structure

Each module handles one resource; all of them are mounted under /api/v1.
"""

from flask import Blueprint

# Create main API blueprint
api_bp = Blueprint("api", __name__)

# Import and register sub-blueprints
from .addons import addons_bp  # noqa: E402
from .bookings import bookings_bp  # noqa: E402
from .categories import categories_bp  # noqa: E402
from .items import items_bp  # noqa: E402
from .subcategories import subcategories_bp  # noqa: E402

api_bp.register_blueprint(categories_bp)
api_bp.register_blueprint(subcategories_bp)
api_bp.register_blueprint(items_bp)
api_bp.register_blueprint(addons_bp)
api_bp.register_blueprint(bookings_bp)
