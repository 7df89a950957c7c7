from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from rentmarket.exceptions import ConcurrencyConflictError, InvalidStateError, ValidationError, VehicleNotFoundError
from rentmarket.services.access_guard import AccessGuard
from rentmarket.services.account_directory import AccountDirectory
from rentmarket.services.common import _lc, positive_number, resolve_store, to_float_safe, vehicle_from_dict
from rentmarket.utils.constants import (
    DEFAULT_MAX_DURATION,
    DEFAULT_RATING,
    LOCATIONS,
    PLACEHOLDER,
    RELEASE_ATTEMPTS,
    SEAT_CAPACITY,
    VEHICLE_TYPES,
    VehicleMode,
)

if TYPE_CHECKING:
    # Only for type hints; won't execute at runtime
    from rentmarket.models.store import Store  # noqa: F401

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "type", "location", "image", "features", "max_duration")


def _capacity_for(mode: str, price) -> dict:
    """Fresh capacity fields for a vehicle entering `mode` with no bookings."""
    if mode == VehicleMode.SHARED:
        return {
            "mode": VehicleMode.SHARED,
            "price_per_seat": positive_number(price, "Price per seat"),
            "seat_capacity": SEAT_CAPACITY,
            "seats_available": SEAT_CAPACITY,
        }
    if mode == VehicleMode.FULL:
        return {
            "mode": VehicleMode.FULL,
            "price_per_hour": positive_number(price, "Price per hour"),
            "fully_available": True,
        }
    raise ValidationError("Mode must be 'full' or 'shared'")


def _check_listing_fields(data: dict) -> None:
    if "name" in data and not (data["name"] or "").strip():
        raise ValidationError("Vehicle name is required")
    if "type" in data and data["type"] not in VEHICLE_TYPES:
        raise ValidationError(f"Vehicle type must be one of: {', '.join(sorted(VEHICLE_TYPES))}")
    if "location" in data and data["location"] not in LOCATIONS:
        raise ValidationError(f"Location must be one of: {', '.join(LOCATIONS)}")
    if "features" in data and not isinstance(data["features"], list):
        raise ValidationError("Features must be a list")
    if "max_duration" in data:
        data["max_duration"] = positive_number(data["max_duration"], "Maximum duration")


class VehicleService:
    """Vehicle catalogue: filter, create, update, switch mode, delete."""

    @staticmethod
    def filter_vehicles(vtype=None, location=None, min_price=None, max_price=None,
                        include_unavailable=False, *, store=None):
        """
        Filter vehicles by type, location and price range (on each vehicle's
        own price basis: per hour or per seat). Only bookable vehicles are
        returned unless include_unavailable is set. Newest first.
        """
        # 1. Resolve data source
        st = resolve_store(store)
        res = [vehicle_from_dict(v) for v in list(st.vehicles.values())]

        # 2. Availability
        if not include_unavailable:
            res = [v for v in res if v.is_available]

        # 3. Type / location filters (case-insensitive)
        if vtype:
            res = [v for v in res if _lc(v.type) == _lc(vtype)]
        if location:
            res = [v for v in res if _lc(v.location) == _lc(location)]

        # 4. Price range filter (invalid min/max ignored)
        min_val = to_float_safe(min_price)
        max_val = to_float_safe(max_price)
        if (min_val is not None) and (max_val is not None) and (min_val > max_val):
            min_val, max_val = max_val, min_val
        if min_val is not None:
            res = [v for v in res if v.listed_price >= min_val]
        if max_val is not None:
            res = [v for v in res if v.listed_price <= max_val]

        res.sort(key=lambda v: v.created_at or "", reverse=True)
        return [v.to_public() for v in res]

    @staticmethod
    def get_vehicle(vid: str, store: Optional["Store"] = None):
        """Return the vehicle variant by ID or raise VehicleNotFoundError."""
        st = resolve_store(store)
        v = vehicle_from_dict(st.get_vehicle(vid)) if vid else None
        if v is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vid}' not found")
        return v

    @staticmethod
    def vehicles_for_owner(owner_id: str, store: Optional["Store"] = None):
        st = resolve_store(store)
        out = [vehicle_from_dict(v) for v in list(st.vehicles.values())
               if str(v.get("owner_id")) == str(owner_id)]
        out.sort(key=lambda v: v.created_at or "", reverse=True)
        return [v.to_public() for v in out]

    @staticmethod
    def create_vehicle(owner_id: str, payload: dict, store: Optional["Store"] = None):
        """
        List a new vehicle for owner_id. payload carries name, type, location,
        image, features, max_duration, phone, reg_no, mode ('full' default or
        'shared') and price (per hour or per seat, matching the mode).
        """
        st = resolve_store(store)
        owner = AccountDirectory(st).get_account(owner_id)

        data = {
            "name": (payload.get("name") or "").strip(),
            "type": payload.get("type"),
            "location": payload.get("location"),
            "features": payload.get("features") or [],
            "max_duration": payload.get("max_duration") or DEFAULT_MAX_DURATION,
        }
        _check_listing_fields(data)
        mode = payload.get("mode") or VehicleMode.FULL
        price = payload.get("price")
        if price is None:
            price = payload.get("price_per_seat" if mode == VehicleMode.SHARED else "price_per_hour")

        data.update(_capacity_for(mode, price))
        data.update({
            "owner_id": owner.account_id,
            "image": (payload.get("image") or "").strip() or PLACEHOLDER,
            "owner_phone": payload.get("phone") or owner.phone or "",
            "owner_reg_no": payload.get("reg_no") or "",
            "rating": DEFAULT_RATING,
            "reviews": [],
            "total_bookings": 0,
        })
        vid = st.create_vehicle(data)
        logger.info("Vehicle %s listed by %s in %s mode", vid, owner.account_id, mode)
        return vehicle_from_dict(st.get_vehicle(vid))

    @staticmethod
    def update_vehicle(vid: str, actor_id: str, payload: dict, store: Optional["Store"] = None):
        """
        Owner edits of listing details and the price for the current mode.
        Capacity fields are left to the booking lifecycle.
        """
        st = resolve_store(store)
        for _ in range(RELEASE_ATTEMPTS):
            vehicle = VehicleService.get_vehicle(vid, store=st)
            AccessGuard.require_owner(actor_id, vehicle, "update")

            changes = {k: payload[k] for k in EDITABLE_FIELDS if payload.get(k) is not None}
            _check_listing_fields(changes)
            if payload.get("price") is not None:
                key = "price_per_seat" if vehicle.mode == VehicleMode.SHARED else "price_per_hour"
                changes[key] = positive_number(payload["price"], "Price")
            if payload.get("phone"):
                changes["owner_phone"] = payload["phone"]
            if payload.get("reg_no"):
                changes["owner_reg_no"] = payload["reg_no"]

            if st.replace_vehicle(vehicle.vehicle_id, vehicle.version, {**vehicle.to_dict(), **changes}):
                return vehicle_from_dict(st.get_vehicle(vehicle.vehicle_id))
        raise ConcurrencyConflictError()

    @staticmethod
    def switch_mode(vid: str, actor_id: str, mode: str, price, store: Optional["Store"] = None):
        """
        Move a vehicle between full rental and seat sharing. Only allowed while
        no booking holds capacity on it; capacity restarts full.
        """
        st = resolve_store(store)
        for _ in range(RELEASE_ATTEMPTS):
            vehicle = VehicleService.get_vehicle(vid, store=st)
            AccessGuard.require_owner(actor_id, vehicle, "update")
            if vehicle.has_open_claims:
                raise InvalidStateError("Cannot switch mode while bookings are open")

            record = vehicle.to_dict()
            for key in ("price_per_hour", "fully_available", "price_per_seat", "seat_capacity", "seats_available"):
                record.pop(key, None)
            record.update(_capacity_for(mode, price))

            if st.replace_vehicle(vehicle.vehicle_id, vehicle.version, record):
                logger.info("Vehicle %s switched to %s mode", vehicle.vehicle_id, mode)
                return vehicle_from_dict(st.get_vehicle(vehicle.vehicle_id))
        raise ConcurrencyConflictError()

    @staticmethod
    def delete_vehicle(vehicle_id: str, actor_id: str, store: Optional["Store"] = None):
        """
        Delete a vehicle if and only if:
        - the vehicle exists and actor_id owns it,
        - no booking still holds capacity on it (pending/confirmed/in-progress).
        Finished bookings keep their vehicle_id as history.
        """
        st = resolve_store(store)
        for _ in range(RELEASE_ATTEMPTS):
            vehicle = VehicleService.get_vehicle(vehicle_id, store=st)
            AccessGuard.require_owner(actor_id, vehicle, "delete")
            if vehicle.has_open_claims:
                raise InvalidStateError("Cannot delete: open bookings exist")
            if st.delete_vehicle(vehicle.vehicle_id, vehicle.version):
                logger.info("Vehicle %s deleted by owner", vehicle.vehicle_id)
                return
        raise ConcurrencyConflictError()
