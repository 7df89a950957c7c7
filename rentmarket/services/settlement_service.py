"""Effects of a completed booking on the vehicle aggregate and the owner's earnings."""

from typing import NamedTuple, Optional

from rentmarket.services.common import round2


class Settlement(NamedTuple):
    vehicle_updates: dict
    owner_id: str
    earnings: float


class SettlementService:

    @staticmethod
    def rating_updates(vehicle, rating: Optional[float]) -> dict:
        """Push one rating onto the vehicle and recompute the (unrounded) mean."""
        if rating is None:
            return {}
        reviews = list(vehicle.reviews) + [rating]
        return {"reviews": reviews, "rating": sum(reviews) / len(reviews)}

    @staticmethod
    def settle(booking, vehicle, feedback: Optional[dict] = None) -> Settlement:
        """
        Compute what completing `booking` does: one more completed booking on
        the vehicle, the renter's rating (if any) and the owner's credit.
        Pure; the caller commits the result together with the status change,
        and only on the move into completed.
        """
        updates = {"total_bookings": vehicle.total_bookings + 1}
        updates.update(SettlementService.rating_updates(vehicle, (feedback or {}).get("rating")))
        return Settlement(updates, vehicle.owner_id, round2(booking.total_cost))
