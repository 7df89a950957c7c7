import pytest

from rentmarket.exceptions import ForbiddenError, ValidationError
from rentmarket.services.booking_service import BookingService


def book(renter, vehicle, start):
    return BookingService.create_booking(renter_id=renter, vehicle_id=vehicle, duration=1,
                                         pickup_location="FME", start_time=start)


def test_list_by_role_newest_first(owner, renter, renter2, shared_vehicle, full_vehicle):
    early = book(renter, shared_vehicle, "2030-01-01T09:00:00Z")
    late = book(renter, full_vehicle, "2030-02-01T09:00:00Z")
    other = book(renter2, shared_vehicle, "2030-01-15T09:00:00Z")

    mine = BookingService.list_bookings(renter, role="renter")
    assert [b["booking_id"] for b in mine] == [late.booking_id, early.booking_id]
    assert mine[0]["vehicle"]["name"] == "Toyota Corolla"

    owned = BookingService.list_bookings(owner, role="owner")
    assert [b["booking_id"] for b in owned] == [late.booking_id, other.booking_id, early.booking_id]

    assert BookingService.list_bookings(owner, role="renter") == []


def test_list_without_role_covers_both_sides(directory, owner, renter, full_vehicle):
    from rentmarket.services.vehicle_service import VehicleService

    other_owner = directory.register("Other", "other@example.com").account_id
    bike = VehicleService.create_vehicle(other_owner, {
        "name": "Honda CD 70", "type": "Bike", "location": "AcB", "price": 20,
    }).vehicle_id
    as_owner = book(renter, full_vehicle, "2030-01-01T09:00:00Z")
    as_renter = book(owner, bike, "2030-01-02T09:00:00Z")

    ids = {b["booking_id"] for b in BookingService.list_bookings(owner)}
    assert ids == {as_owner.booking_id, as_renter.booking_id}


def test_list_rejects_unknown_role(renter):
    with pytest.raises(ValidationError):
        BookingService.list_bookings(renter, role="admin")


def test_detail_visible_to_renter_and_owner_only(owner, renter, renter2, full_vehicle):
    b = book(renter, full_vehicle, "2030-01-01T09:00:00Z")

    assert BookingService.get_booking(b.booking_id, renter)["booking_id"] == b.booking_id
    detail = BookingService.get_booking(b.booking_id, owner)
    assert detail["vehicle"]["owner_id"] == owner
    with pytest.raises(ForbiddenError):
        BookingService.get_booking(b.booking_id, renter2)
