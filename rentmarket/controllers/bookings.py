from flask import Blueprint, g, jsonify, request

from ..exceptions import ValidationError
from ..services.booking_service import BookingService
from ..utils.decorators import actor_required

bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _pick(data: dict, *keys):
    """First present key wins, so falsy values like 0 still reach validation."""
    for key in keys:
        if key in data:
            return data[key]
    return None


@bp.post("")
@actor_required
def create_booking():
    """Book a whole vehicle, or seats on a shared one, for the current account."""
    data = _json_body()
    booking = BookingService.create_booking(
        renter_id=g.actor_id,
        vehicle_id=_pick(data, "vehicleId", "vehicle_id"),
        duration=data.get("duration"),
        pickup_location=_pick(data, "pickupLocation", "pickup_location"),
        start_time=_pick(data, "startTime", "start_time"),
        seats_requested=_pick(data, "seatsRequested", "seats_requested"),
        phone=data.get("phone"),
        reg_no=_pick(data, "regNo", "reg_no"),
    )
    return jsonify({"message": "Booking created successfully", "booking": booking.to_dict()}), 201


@bp.get("")
@actor_required
def list_bookings():
    role = (request.args.get("role") or "").strip() or None
    return jsonify(BookingService.list_bookings(g.actor_id, role=role))


@bp.get("/<booking_id>")
@actor_required
def booking_detail(booking_id):
    return jsonify(BookingService.get_booking(booking_id, g.actor_id))


@bp.put("/<booking_id>")
@actor_required
def update_booking(booking_id):
    """Advance status / payment status, or leave feedback (renter only)."""
    data = _json_body()
    booking = BookingService.update_booking(
        booking_id,
        g.actor_id,
        status=data.get("status") or None,
        payment_status=_pick(data, "paymentStatus", "payment_status") or None,
        feedback=data.get("feedback"),
    )
    return jsonify({"message": "Booking updated successfully", "booking": booking.to_dict()})


@bp.delete("/<booking_id>")
@actor_required
def cancel_booking(booking_id):
    booking = BookingService.cancel_booking(booking_id, g.actor_id)
    return jsonify({"message": "Booking cancelled successfully", "booking": booking.to_dict()})
