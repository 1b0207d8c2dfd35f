"""
Bookings API - reservations of bookable items.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from catalog_api.extensions import get_services
from catalog_api.routes.api.common import json_body, list_params
from catalog_shared.schemas import (
    AvailabilityQueryParams,
    BookingFilterParams,
    CreateBookingRequest,
    UpdateBookingRequest,
)
from catalog_shared.serializers import paginated_response, success_response

bookings_bp = Blueprint("bookings", __name__)


@bookings_bp.post("/bookings")
def create_booking():
    """
    Create a booking.

    Returns 409 when the requested slot overlaps an active booking.
    """
    payload = CreateBookingRequest(**json_body())
    booking = get_services().bookings.create_booking(payload.dict())
    return jsonify(
        success_response(booking, "Booking created successfully")
    ), HTTPStatus.CREATED


@bookings_bp.get("/bookings")
def list_bookings():
    """
    List bookings.

    Query: item_id, user_email, status, date_from, date_to, page, limit
    """
    filters, page_request, _search = list_params(BookingFilterParams)
    result = get_services().bookings.list_bookings(filters, page_request)
    return jsonify(paginated_response(result))


@bookings_bp.get("/bookings/<int:booking_id>")
def get_booking(booking_id: int):
    return jsonify(success_response(get_services().bookings.get_booking(booking_id)))


@bookings_bp.put("/bookings/<int:booking_id>")
def update_booking(booking_id: int):
    payload = UpdateBookingRequest(**json_body())
    booking = get_services().bookings.update_booking(
        booking_id, payload.dict(exclude_unset=True)
    )
    return jsonify(success_response(booking, "Booking updated successfully"))


@bookings_bp.post("/bookings/<int:booking_id>/cancel")
def cancel_booking(booking_id: int):
    booking = get_services().bookings.cancel_booking(booking_id)
    return jsonify(success_response(booking, "Booking cancelled successfully"))


@bookings_bp.get("/bookings/availability/<int:item_id>")
def get_availability(item_id: int):
    query = AvailabilityQueryParams(**request.args.to_dict())
    slots = get_services().bookings.get_available_slots(item_id, query.date)
    return jsonify(
        success_response({"item_id": item_id, "date": query.date.isoformat(), "slots": slots})
    )


@bookings_bp.get("/bookings/user/<string:user_email>")
def get_user_bookings(user_email: str):
    return jsonify(success_response(get_services().bookings.get_user_bookings(user_email)))
