from dataclasses import dataclass, field

from rentmarket.exceptions import CapacityExceededError, ValidationError
from rentmarket.utils.constants import DEFAULT_MAX_DURATION, DEFAULT_RATING, SEAT_CAPACITY, VehicleMode


@dataclass
class VehicleBase:
    """
    Base vehicle model. The Store keeps raw dicts; we wrap them into one of
    two variants so each mode carries only its own capacity fields.

    claim()/release() never mutate the object: they return the field updates
    the caller commits to the store in one versioned write.
    """
    vehicle_id: str
    owner_id: str
    name: str
    type: str
    location: str
    image: str = ""
    features: list = field(default_factory=list)
    owner_phone: str = ""
    owner_reg_no: str = ""
    max_duration: float = DEFAULT_MAX_DURATION
    rating: float = DEFAULT_RATING
    reviews: list = field(default_factory=list)
    total_bookings: int = 0
    created_at: str = ""
    updated_at: str = ""
    version: int = 0

    mode = ""

    @property
    def listed_price(self) -> float:
        raise NotImplementedError

    @property
    def is_available(self) -> bool:
        raise NotImplementedError

    @property
    def has_open_claims(self) -> bool:
        """True while any booking still holds capacity on this vehicle."""
        raise NotImplementedError

    def seats_for(self, seats_requested) -> int:
        return 1

    def quote(self, duration: float, seats: int) -> float:
        raise NotImplementedError

    def claim(self, seats: int) -> dict:
        raise NotImplementedError

    def release(self, seats: int) -> dict:
        raise NotImplementedError

    def is_owned_by(self, account_id: str) -> bool:
        return bool(account_id) and str(self.owner_id) == str(account_id)

    def capacity_fields(self) -> dict:
        raise NotImplementedError

    def to_dict(self) -> dict:
        d = {
            "vehicle_id": self.vehicle_id,
            "owner_id": self.owner_id,
            "name": self.name,
            "type": self.type,
            "location": self.location,
            "image": self.image,
            "features": list(self.features),
            "owner_phone": self.owner_phone,
            "owner_reg_no": self.owner_reg_no,
            "max_duration": self.max_duration,
            "rating": self.rating,
            "reviews": list(self.reviews),
            "total_bookings": self.total_bookings,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
            "mode": self.mode,
        }
        d.update(self.capacity_fields())
        return d

    def to_public(self) -> dict:
        d = self.to_dict()
        d["is_available"] = self.is_available
        d["price"] = self.listed_price
        d["rating"] = round(self.rating, 2)
        return d


@dataclass
class FullRentalVehicle(VehicleBase):
    """The whole vehicle goes to one renter, priced per hour."""
    price_per_hour: float = 0.0
    fully_available: bool = True

    mode = VehicleMode.FULL

    @property
    def listed_price(self) -> float:
        return self.price_per_hour

    @property
    def is_available(self) -> bool:
        return self.fully_available

    @property
    def has_open_claims(self) -> bool:
        return not self.fully_available

    def quote(self, duration: float, seats: int) -> float:
        return round(self.price_per_hour * duration, 2)

    def claim(self, seats: int) -> dict:
        if not self.fully_available:
            raise CapacityExceededError("Vehicle is already booked")
        return {"fully_available": False}

    def release(self, seats: int) -> dict:
        return {"fully_available": True}

    def capacity_fields(self) -> dict:
        return {"price_per_hour": self.price_per_hour, "fully_available": self.fully_available}


@dataclass
class SeatSharedVehicle(VehicleBase):
    """
    Seats are sold individually up to a fixed capacity. The vehicle counts as
    available while at least one seat is free.
    """
    price_per_seat: float = 0.0
    seat_capacity: int = SEAT_CAPACITY
    seats_available: int = SEAT_CAPACITY

    mode = VehicleMode.SHARED

    @property
    def listed_price(self) -> float:
        return self.price_per_seat

    @property
    def is_available(self) -> bool:
        return self.seats_available > 0

    @property
    def has_open_claims(self) -> bool:
        return self.seats_available < self.seat_capacity

    def seats_for(self, seats_requested) -> int:
        if seats_requested in (None, ""):
            return 1
        if isinstance(seats_requested, bool) or (
                isinstance(seats_requested, float) and not seats_requested.is_integer()):
            raise ValidationError("Seats requested must be a whole number")
        try:
            seats = int(seats_requested)
        except (TypeError, ValueError):
            raise ValidationError("Seats requested must be a whole number")
        if seats < 1:
            raise ValidationError("At least one seat must be requested")
        return seats

    def quote(self, duration: float, seats: int) -> float:
        return round(self.price_per_seat * seats, 2)

    def claim(self, seats: int) -> dict:
        if seats > self.seats_available:
            raise CapacityExceededError(
                f"Only {self.seats_available} seat(s) left, {seats} requested"
            )
        return {"seats_available": self.seats_available - seats}

    def release(self, seats: int) -> dict:
        return {"seats_available": min(self.seat_capacity, self.seats_available + seats)}

    def capacity_fields(self) -> dict:
        return {
            "price_per_seat": self.price_per_seat,
            "seat_capacity": self.seat_capacity,
            "seats_available": self.seats_available,
        }
