from flask import Blueprint, g, jsonify, request

from ..exceptions import ValidationError
from ..services.vehicle_service import VehicleService
from ..utils.decorators import actor_required

bp = Blueprint("vehicles", __name__, url_prefix="/api/vehicles")

# camelCase request keys accepted alongside snake_case
ALIASES = {
    "maxDuration": "max_duration",
    "pricePerHour": "price_per_hour",
    "pricePerSeat": "price_per_seat",
    "regNo": "reg_no",
}


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return {ALIASES.get(k, k): v for k, v in data.items()}


@bp.get("")
def list_vehicles():
    """Bookable vehicles, filtered by type, location and price; ?all=1 includes booked ones."""
    q = {k: (v or "").strip() for k, v in request.args.items()}
    vehicles = VehicleService.filter_vehicles(
        vtype=q.get("type") or None,
        location=q.get("location") or None,
        min_price=q.get("minPrice") or None,
        max_price=q.get("maxPrice") or None,
        include_unavailable=q.get("all") in ("1", "true", "yes"),
    )
    return jsonify(vehicles)


@bp.get("/<vid>")
def vehicle_detail(vid):
    return jsonify(VehicleService.get_vehicle(vid).to_public())


@bp.get("/owner/<owner_id>")
def owner_vehicles(owner_id):
    return jsonify(VehicleService.vehicles_for_owner(owner_id))


@bp.post("")
@actor_required
def add_vehicle():
    vehicle = VehicleService.create_vehicle(g.actor_id, _payload())
    return jsonify({"message": "Vehicle added successfully", "vehicle": vehicle.to_public()}), 201


@bp.put("/<vid>")
@actor_required
def update_vehicle(vid):
    vehicle = VehicleService.update_vehicle(vid, g.actor_id, _payload())
    return jsonify({"message": "Vehicle updated successfully", "vehicle": vehicle.to_public()})


@bp.post("/<vid>/mode")
@actor_required
def switch_mode(vid):
    data = _payload()
    vehicle = VehicleService.switch_mode(vid, g.actor_id, data.get("mode"), data.get("price"))
    return jsonify({"message": "Vehicle mode updated", "vehicle": vehicle.to_public()})


@bp.delete("/<vid>")
@actor_required
def delete_vehicle(vid):
    VehicleService.delete_vehicle(vid, g.actor_id)
    return jsonify({"message": "Vehicle deleted successfully"})
