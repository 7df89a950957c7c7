"""Shared service helpers and factories."""

import math
from typing import Optional

from flask import current_app, has_app_context

from rentmarket.config import Config
from rentmarket.exceptions import ValidationError
from rentmarket.models.account import Account
from rentmarket.models.booking import Booking
from rentmarket.models.store import Store
from rentmarket.models.vehicle import VehicleBase, FullRentalVehicle, SeatSharedVehicle
from rentmarket.utils.constants import (
    DEFAULT_MAX_DURATION,
    DEFAULT_RATING,
    SEAT_CAPACITY,
    VehicleMode,
)


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def resolve_store(store: Optional[Store] = None) -> Store:
    """Prefer an injected store (tests); otherwise the module-level _store()."""
    return store if store is not None else _store()


def setting(name: str):
    """Read a config value from the running app, falling back to Config."""
    if has_app_context():
        return current_app.config.get(name, getattr(Config, name, None))
    return getattr(Config, name, None)


# -------- math & input helpers --------
def round2(x: float) -> float:
    return round(float(x), 2)


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def positive_number(value, label: str) -> float:
    num = to_float_safe(value)
    if num is None or not math.isfinite(num) or num <= 0:
        raise ValidationError(f"{label} must be a positive number")
    return num


def _lc(s):
    """Safe lowercase for case-insensitive compare."""
    return (s or "").lower()


# -------- dict -> rich model mappers --------
def vehicle_from_dict(d: Optional[dict]) -> Optional[VehicleBase]:
    """Map a stored vehicle dict to its mode variant."""
    if not d:
        return None
    base = dict(
        vehicle_id=d.get("vehicle_id"),
        owner_id=d.get("owner_id"),
        name=d.get("name", ""),
        type=d.get("type", ""),
        location=d.get("location", ""),
        image=d.get("image", ""),
        features=list(d.get("features") or []),
        owner_phone=d.get("owner_phone", ""),
        owner_reg_no=d.get("owner_reg_no", ""),
        max_duration=float(d.get("max_duration") or DEFAULT_MAX_DURATION),
        rating=float(d.get("rating", DEFAULT_RATING)),
        reviews=list(d.get("reviews") or []),
        total_bookings=int(d.get("total_bookings") or 0),
        created_at=d.get("created_at", ""),
        updated_at=d.get("updated_at", ""),
        version=d.get("version", 0),
    )
    if d.get("mode") == VehicleMode.SHARED:
        capacity = int(d.get("seat_capacity") or SEAT_CAPACITY)
        return SeatSharedVehicle(
            **base,
            price_per_seat=float(d.get("price_per_seat") or 0.0),
            seat_capacity=capacity,
            seats_available=int(d.get("seats_available", capacity)),
        )
    return FullRentalVehicle(
        **base,
        price_per_hour=float(d.get("price_per_hour") or 0.0),
        fully_available=bool(d.get("fully_available", True)),
    )


def booking_from_dict(d: Optional[dict]) -> Optional[Booking]:
    """Map a stored booking dict to a Booking."""
    if not d:
        return None
    return Booking(
        booking_id=d.get("booking_id"),
        vehicle_id=d.get("vehicle_id"),
        renter_id=d.get("renter_id"),
        pickup_location=d.get("pickup_location", ""),
        duration=float(d.get("duration") or 0),
        total_cost=float(d.get("total_cost") or 0),
        booking_date=d.get("booking_date", ""),
        return_date=d.get("return_date", ""),
        seats_booked=int(d.get("seats_booked") or 1),
        renter_phone=d.get("renter_phone", ""),
        renter_reg_no=d.get("renter_reg_no", ""),
        status=d.get("status"),
        payment_status=d.get("payment_status"),
        feedback=dict(d["feedback"]) if d.get("feedback") else None,
        created_at=d.get("created_at", ""),
        updated_at=d.get("updated_at", ""),
        version=d.get("version", 0),
    )


def account_from_dict(d: Optional[dict]) -> Optional[Account]:
    if not d:
        return None
    return Account(
        account_id=d.get("account_id"),
        full_name=d.get("full_name", ""),
        email=d.get("email", ""),
        phone=d.get("phone", ""),
        reg_no=d.get("reg_no", ""),
        location=d.get("location", ""),
        total_earnings=float(d.get("total_earnings") or 0),
    )
