"""
Centralized error handlers for the catalog gateway.
"""

from http import HTTPStatus

from flask import Flask, current_app, jsonify
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from catalog_shared.errors import CatalogError, StorageError
from catalog_shared.logging_config import get_logger
from catalog_shared.serializers import error_response

logger = get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    """
    Register centralized error handlers for the Flask app.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(CatalogError)
    def handle_catalog_error(e: CatalogError):
        """Controlled errors carry their own status code."""
        status = HTTPStatus(e.http_code)
        if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"Catalog error: {e.message}", exc_info=True)
        else:
            logger.warning(f"{e.kind}: {e.message}")
        return jsonify(error_response(e.kind, e.message, e.details)), status

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(e: PydanticValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Pydantic validation error: {e}")
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        return jsonify(
            error_response("bad_request", "Invalid request data", {"errors": errors})
        ), HTTPStatus.BAD_REQUEST

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e: IntegrityError):
        """Unique/foreign key violations that slipped past the service checks."""
        logger.warning(f"Integrity error: {e.orig}")
        return jsonify(
            error_response("conflict", "The request conflicts with existing data")
        ), HTTPStatus.CONFLICT

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e: SQLAlchemyError):
        """Handle database errors."""
        logger.error(f"Database error: {e}", exc_info=True)
        return jsonify(
            error_response(StorageError.kind, "Database error")
        ), StorageError.http_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle HTTP exceptions from Werkzeug."""
        logger.warning(f"HTTP exception {e.code}: {e.description}")
        error = (e.name or "http_error").lower().replace(" ", "_")
        return jsonify(error_response(error, e.description or str(e))), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle any unhandled exceptions."""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        details = {"detail": str(e)} if current_app.config.get("DEBUG_MODE") else None
        return jsonify(
            error_response("internal_error", "Internal server error", details)
        ), HTTPStatus.INTERNAL_SERVER_ERROR
