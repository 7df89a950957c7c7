"""Authorization checks run before any booking mutation."""

from typing import NamedTuple, Optional

from rentmarket.exceptions import ForbiddenError, SelfRentalError


class Access(NamedTuple):
    is_renter: bool
    is_owner: bool

    @property
    def is_participant(self) -> bool:
        return self.is_renter or self.is_owner


class AccessGuard:
    """Pure predicates over already-loaded accounts, bookings and vehicles."""

    @staticmethod
    def can_modify(actor_id: str, booking, vehicle: Optional[object]) -> Access:
        """
        Who the actor is relative to a booking. A booking whose vehicle has
        been deleted keeps only its renter.
        """
        is_owner = vehicle is not None and vehicle.is_owned_by(actor_id)
        return Access(is_renter=booking.is_renter(actor_id), is_owner=is_owner)

    @staticmethod
    def ensure_not_self_rental(account, vehicle) -> None:
        if account.is_owner_of(vehicle):
            raise SelfRentalError("You cannot rent your own vehicle")

    @staticmethod
    def require_participant(access: Access, action: str = "access") -> None:
        if not access.is_participant:
            raise ForbiddenError(f"Not authorized to {action} this booking")

    @staticmethod
    def require_renter(access: Access, action: str) -> None:
        if not access.is_renter:
            raise ForbiddenError(f"Only the renter may {action} this booking")

    @staticmethod
    def require_owner(actor_id: str, vehicle, action: str) -> None:
        if not vehicle.is_owned_by(actor_id):
            raise ForbiddenError(f"Not authorized to {action} this vehicle")
