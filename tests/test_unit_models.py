"""Unit tests for the vehicle variants, booking state machine and access guard."""

import pytest

from rentmarket.exceptions import CapacityExceededError, ForbiddenError, InvalidStateError, SelfRentalError
from rentmarket.models.account import Account
from rentmarket.models.booking import Booking
from rentmarket.models.vehicle import FullRentalVehicle, SeatSharedVehicle
from rentmarket.services.access_guard import AccessGuard
from rentmarket.services.settlement_service import SettlementService


def full(**kw):
    return FullRentalVehicle(vehicle_id="v1", owner_id="o1", name="Car", type="Sedan",
                             location="FME", price_per_hour=100.0, **kw)


def shared(**kw):
    return SeatSharedVehicle(vehicle_id="v2", owner_id="o1", name="Van", type="Van",
                             location="FME", price_per_seat=50.0, **kw)


def booking(status="pending", **kw):
    return Booking(booking_id="b1", vehicle_id="v1", renter_id="r1", pickup_location="FME",
                   duration=2, total_cost=200.0, booking_date="", return_date="", status=status, **kw)


def test_full_rental_claim_and_release():
    v = full()
    assert v.quote(3, 1) == 300.0
    assert v.claim(1) == {"fully_available": False}
    assert full(fully_available=False).release(1) == {"fully_available": True}
    with pytest.raises(CapacityExceededError):
        full(fully_available=False).claim(1)


def test_seat_release_is_clamped_to_capacity():
    assert shared(seats_available=3).release(2) == {"seats_available": 4}
    assert shared(seats_available=0).release(2) == {"seats_available": 2}


def test_seat_claim_checks_remaining():
    v = shared(seats_available=2)
    assert v.quote(5, 2) == 100.0
    assert v.claim(2) == {"seats_available": 0}
    with pytest.raises(CapacityExceededError):
        v.claim(3)


def test_shared_vehicle_availability_is_derived():
    assert shared(seats_available=1).is_available
    assert not shared(seats_available=0).is_available
    assert shared(seats_available=4).has_open_claims is False
    assert "fully_available" not in shared().to_dict()
    assert "seats_available" not in full().to_dict()


@pytest.mark.parametrize("current,target", [
    ("pending", "confirmed"),
    ("pending", "in-progress"),
    ("confirmed", "completed"),
    ("in-progress", "completed"),
    ("pending", "cancelled"),
    ("confirmed", "cancelled"),
    ("completed", "completed"),
    ("cancelled", "cancelled"),
])
def test_allowed_transitions(current, target):
    booking(current).check_transition(target)


@pytest.mark.parametrize("current,target", [
    ("confirmed", "pending"),
    ("in-progress", "cancelled"),
    ("completed", "cancelled"),
    ("completed", "pending"),
    ("cancelled", "pending"),
])
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidStateError):
        booking(current).check_transition(target)


def test_access_roles():
    b, v = booking(), full()
    assert AccessGuard.can_modify("r1", b, v) == (True, False)
    assert AccessGuard.can_modify("o1", b, v) == (False, True)
    assert AccessGuard.can_modify("x", b, v) == (False, False)
    assert AccessGuard.can_modify("o1", b, None) == (False, False)

    with pytest.raises(ForbiddenError):
        AccessGuard.require_participant(AccessGuard.can_modify("x", b, v))
    with pytest.raises(ForbiddenError):
        AccessGuard.require_renter(AccessGuard.can_modify("o1", b, v), "cancel")


def test_self_rental_guard():
    with pytest.raises(SelfRentalError):
        AccessGuard.ensure_not_self_rental(Account(account_id="o1"), full())
    AccessGuard.ensure_not_self_rental(Account(account_id="r1"), full())


def test_settlement_is_pure():
    v = full(reviews=[5.0], total_bookings=2)
    s = SettlementService.settle(booking(), v, {"rating": 4.0, "comment": ""})

    assert s.vehicle_updates == {"total_bookings": 3, "reviews": [5.0, 4.0], "rating": 4.5}
    assert s.owner_id == "o1"
    assert s.earnings == 200.0
    assert v.reviews == [5.0]


def test_rating_is_stored_as_exact_mean_and_rounded_for_display():
    v = full(reviews=[5.0, 4.0])
    updates = SettlementService.rating_updates(v, 4.0)
    assert updates["rating"] == pytest.approx(13 / 3)
    assert updates["rating"] != 4.33

    rated = full(reviews=updates["reviews"], rating=updates["rating"])
    assert rated.to_dict()["rating"] == pytest.approx(13 / 3)
    assert rated.to_public()["rating"] == 4.33
    assert v.total_bookings == 2
