from dataclasses import dataclass, field, replace
from typing import Optional

from rentmarket.exceptions import InvalidStateError
from rentmarket.utils.constants import (
    STATUS_ORDER,
    TERMINAL_STATUSES,
    CANCELLABLE_STATUSES,
    OPEN_STATUSES,
    BookingStatus,
    PaymentStatus,
)


@dataclass
class Booking:
    """
    One reservation of one vehicle by one renter.

    total_cost is fixed at creation. Status moves forward only:
    pending -> confirmed -> in-progress -> completed, with cancelled reachable
    from pending or confirmed.
    """
    booking_id: str
    vehicle_id: str
    renter_id: str
    pickup_location: str
    duration: float
    total_cost: float
    booking_date: str
    return_date: str
    seats_booked: int = 1
    renter_phone: str = ""
    renter_reg_no: str = ""
    status: str = BookingStatus.PENDING
    payment_status: str = PaymentStatus.UNPAID
    feedback: Optional[dict] = None
    created_at: str = ""
    updated_at: str = ""
    version: int = 0

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def is_renter(self, account_id: str) -> bool:
        return bool(account_id) and str(self.renter_id) == str(account_id)

    def check_transition(self, new_status: str) -> None:
        """Raise InvalidStateError unless moving to new_status is allowed."""
        if new_status == self.status:
            return
        if self.status in TERMINAL_STATUSES:
            raise InvalidStateError(f"Booking is already {self.status}")
        if new_status == BookingStatus.CANCELLED:
            if self.status not in CANCELLABLE_STATUSES:
                raise InvalidStateError("Can only cancel pending or confirmed bookings")
            return
        if STATUS_ORDER.index(new_status) < STATUS_ORDER.index(self.status):
            raise InvalidStateError(f"Cannot move booking from {self.status} back to {new_status}")

    def evolve(self, **changes) -> "Booking":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "booking_id": self.booking_id,
            "vehicle_id": self.vehicle_id,
            "renter_id": self.renter_id,
            "renter_phone": self.renter_phone,
            "renter_reg_no": self.renter_reg_no,
            "pickup_location": self.pickup_location,
            "duration": self.duration,
            "seats_booked": self.seats_booked,
            "total_cost": self.total_cost,
            "status": self.status,
            "payment_status": self.payment_status,
            "booking_date": self.booking_date,
            "return_date": self.return_date,
            "feedback": dict(self.feedback) if self.feedback else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }
