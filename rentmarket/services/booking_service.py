"""Booking lifecycle: create, list, view, transition and cancel bookings."""

from __future__ import annotations

import logging
import uuid
from typing import Optional, TYPE_CHECKING

from rentmarket.exceptions import (
    BookingNotFoundError,
    CapacityExceededError,
    ConcurrencyConflictError,
    InvalidStateError,
    ValidationError,
    VehicleNotFoundError,
)
from rentmarket.models.booking import Booking
from rentmarket.services.access_guard import AccessGuard
from rentmarket.services.account_directory import AccountDirectory
from rentmarket.services.common import (
    booking_from_dict,
    positive_number,
    resolve_store,
    setting,
    to_float_safe,
    vehicle_from_dict,
)
from rentmarket.services.notification_service import NotificationService
from rentmarket.services.settlement_service import SettlementService
from rentmarket.utils.constants import (
    ALL_STATUSES,
    CANCELLABLE_STATUSES,
    CLAIM_ATTEMPTS,
    LOCATIONS,
    MAX_RATING,
    PAYMENT_STATUSES,
    RELEASE_ATTEMPTS,
    BookingStatus,
)
from rentmarket.utils.timeutils import parse_start_time, return_time, to_iso, utcnow

if TYPE_CHECKING:
    from rentmarket.models.store import Store  # noqa: F401

logger = logging.getLogger(__name__)

ROLES = ("renter", "owner")


def _load_vehicle(st, vehicle_id):
    vehicle = vehicle_from_dict(st.get_vehicle(vehicle_id)) if vehicle_id else None
    if vehicle is None:
        raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
    return vehicle


def _load_booking(st, booking_id) -> Booking:
    booking = booking_from_dict(st.get_booking(booking_id)) if booking_id else None
    if booking is None:
        raise BookingNotFoundError(f"Error: booking with ID '{booking_id}' not found")
    return booking


def _clean_feedback(feedback) -> dict:
    if not isinstance(feedback, dict):
        raise ValidationError("Feedback must be an object with rating and comment")
    rating = feedback.get("rating")
    if rating is not None:
        rating = to_float_safe(rating)
        if rating is None or not 0 <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between 0 and {MAX_RATING}")
    comment = feedback.get("comment")
    return {"rating": rating, "comment": str(comment) if comment is not None else ""}


def _vehicle_summary(record: Optional[dict]) -> Optional[dict]:
    if not record:
        return None
    return {k: record.get(k) for k in ("vehicle_id", "name", "type", "mode", "owner_id", "location", "image")}


class BookingService:
    """
    The sole writer of vehicle capacity changes caused by bookings.

    Each mutation reads the vehicle (and booking), decides, then hands the
    vehicle update and booking write to Store.commit as one versioned unit.
    A lost race means someone else changed the vehicle in between; we re-read
    and decide again.
    """

    @staticmethod
    def create_booking(
            renter_id: str,
            vehicle_id: str,
            duration,
            pickup_location: str,
            start_time=None,
            seats_requested=None,
            phone: Optional[str] = None,
            reg_no: Optional[str] = None,
            store: Optional["Store"] = None,
    ) -> Booking:
        """
        Reserve capacity on a vehicle and record a pending booking.

        Raises:
            ValidationError, AccountNotFoundError, VehicleNotFoundError,
            SelfRentalError, CapacityExceededError
        """
        st = resolve_store(store)
        duration = positive_number(duration, "Duration")
        if pickup_location not in LOCATIONS:
            raise ValidationError(f"Pickup location must be one of: {', '.join(LOCATIONS)}")
        start = parse_start_time(start_time, setting("TIMEZONE")) if start_time else utcnow()

        renter = AccountDirectory(st).get_account(renter_id)

        for attempt in range(1, CLAIM_ATTEMPTS + 1):
            vehicle = _load_vehicle(st, vehicle_id)
            AccessGuard.ensure_not_self_rental(renter, vehicle)
            if duration > vehicle.max_duration:
                raise ValidationError(f"Maximum rental duration is {vehicle.max_duration:g} hours")

            seats = vehicle.seats_for(seats_requested)
            ledger_updates = vehicle.claim(seats)

            now = to_iso(utcnow())
            booking = Booking(
                booking_id=str(uuid.uuid4()),
                vehicle_id=vehicle.vehicle_id,
                renter_id=renter.account_id,
                renter_phone=phone or renter.phone or "",
                renter_reg_no=reg_no or "",
                pickup_location=pickup_location,
                duration=duration,
                seats_booked=seats,
                total_cost=vehicle.quote(duration, seats),
                booking_date=to_iso(start),
                return_date=to_iso(return_time(start, duration)),
                created_at=now,
                updated_at=now,
            )
            if st.commit(vehicle.vehicle_id, vehicle_version=vehicle.version,
                         vehicle_updates=ledger_updates, booking=booking.to_dict()):
                created = booking_from_dict(st.get_booking(booking.booking_id))
                logger.info("Booking %s created on vehicle %s (%d seat(s))",
                            created.booking_id, vehicle.vehicle_id, seats)
                NotificationService.notify("booking_created", created.to_dict(), st.get_vehicle(vehicle.vehicle_id))
                return created
            logger.info("Lost capacity race on vehicle %s (attempt %d)", vehicle.vehicle_id, attempt)

        raise CapacityExceededError("Vehicle was booked by someone else, please try again")

    @staticmethod
    def list_bookings(actor_id: str, role: Optional[str] = None, store: Optional["Store"] = None) -> list[dict]:
        """
        Bookings the actor takes part in, most recent booking_date first.
        role='renter' -> bookings the actor made; role='owner' -> bookings on
        the actor's vehicles; no role -> both.
        """
        st = resolve_store(store)
        if role and role not in ROLES:
            raise ValidationError("Role must be 'renter' or 'owner'")

        owned = {vid for vid, v in list(st.vehicles.items()) if str(v.get("owner_id")) == str(actor_id)}

        def visible(b):
            as_renter = str(b.get("renter_id")) == str(actor_id)
            as_owner = b.get("vehicle_id") in owned
            if role == "renter":
                return as_renter
            if role == "owner":
                return as_owner
            return as_renter or as_owner

        out = []
        for b in st.bookings_where(visible):
            out.append({**b, "vehicle": _vehicle_summary(st.get_vehicle(b.get("vehicle_id")))})
        out.sort(key=lambda x: x.get("booking_date") or "", reverse=True)
        return out

    @staticmethod
    def get_booking(booking_id: str, actor_id: str, store: Optional["Store"] = None) -> dict:
        """Booking detail for its renter or the vehicle owner."""
        st = resolve_store(store)
        booking = _load_booking(st, booking_id)
        vehicle_record = st.get_vehicle(booking.vehicle_id)
        access = AccessGuard.can_modify(actor_id, booking, vehicle_from_dict(vehicle_record))
        AccessGuard.require_participant(access, "view")
        return {**booking.to_dict(), "vehicle": _vehicle_summary(vehicle_record)}

    @staticmethod
    def update_booking(
            booking_id: str,
            actor_id: str,
            status: Optional[str] = None,
            payment_status: Optional[str] = None,
            feedback: Optional[dict] = None,
            store: Optional["Store"] = None,
    ) -> Booking:
        """
        Advance status, change payment status and/or attach feedback.

        - renter or owner may advance status and set payment status
        - only the renter may cancel or leave feedback
        - feedback goes with (or after) completion, once per booking
        - entering completed releases capacity and settles; entering
          cancelled releases capacity; repeating either is a no-op
        """
        st = resolve_store(store)
        if status is not None and status not in ALL_STATUSES:
            raise ValidationError(f"Unknown booking status: {status}")
        if payment_status is not None and payment_status not in PAYMENT_STATUSES:
            raise ValidationError(f"Unknown payment status: {payment_status}")
        if feedback is not None:
            feedback = _clean_feedback(feedback)

        for attempt in range(1, RELEASE_ATTEMPTS + 1):
            booking = _load_booking(st, booking_id)
            vehicle = vehicle_from_dict(st.get_vehicle(booking.vehicle_id))
            access = AccessGuard.can_modify(actor_id, booking, vehicle)
            AccessGuard.require_participant(access, "update")

            new_status = status or booking.status
            entering = new_status != booking.status
            if entering and new_status == BookingStatus.CANCELLED:
                AccessGuard.require_renter(access, "cancel")
            if feedback is not None:
                AccessGuard.require_renter(access, "leave feedback on")
            booking.check_transition(new_status)
            if feedback is not None:
                if new_status != BookingStatus.COMPLETED:
                    raise InvalidStateError("Feedback can only be left on a completed booking")
                if booking.feedback:
                    raise InvalidStateError("Feedback was already submitted for this booking")

            vehicle_updates = None
            credit = None
            if entering and new_status in (BookingStatus.COMPLETED, BookingStatus.CANCELLED):
                if vehicle is None:
                    raise VehicleNotFoundError(f"Error: vehicle with ID '{booking.vehicle_id}' not found")
                vehicle_updates = vehicle.release(booking.seats_booked)
                if new_status == BookingStatus.COMPLETED:
                    settlement = SettlementService.settle(booking, vehicle, feedback)
                    vehicle_updates.update(settlement.vehicle_updates)
                    credit = (settlement.owner_id, settlement.earnings)
            elif feedback is not None and vehicle is not None:
                # late feedback on an already completed booking
                vehicle_updates = SettlementService.rating_updates(vehicle, feedback.get("rating")) or None

            updated = booking.evolve(
                status=new_status,
                payment_status=payment_status or booking.payment_status,
                feedback=feedback if feedback is not None else booking.feedback,
            )
            if st.commit(booking.vehicle_id,
                         vehicle_version=vehicle.version if vehicle_updates is not None else None,
                         vehicle_updates=vehicle_updates,
                         booking=updated.to_dict(),
                         booking_version=booking.version,
                         credit=credit):
                if entering:
                    logger.info("Booking %s moved %s -> %s by %s",
                                booking.booking_id, booking.status, new_status, actor_id)
                result = booking_from_dict(st.get_booking(booking.booking_id))
                NotificationService.notify("booking_updated", result.to_dict(), st.get_vehicle(booking.vehicle_id))
                return result
            logger.info("Lost update race on booking %s (attempt %d)", booking_id, attempt)

        raise ConcurrencyConflictError()

    @staticmethod
    def cancel_booking(booking_id: str, actor_id: str, store: Optional["Store"] = None) -> Booking:
        """Renter-only cancellation of a pending or confirmed booking; gives its capacity back."""
        st = resolve_store(store)
        for attempt in range(1, RELEASE_ATTEMPTS + 1):
            booking = _load_booking(st, booking_id)
            vehicle = vehicle_from_dict(st.get_vehicle(booking.vehicle_id))
            access = AccessGuard.can_modify(actor_id, booking, vehicle)
            AccessGuard.require_renter(access, "cancel")
            if booking.status not in CANCELLABLE_STATUSES:
                raise InvalidStateError("Can only cancel pending or confirmed bookings")
            if vehicle is None:
                raise VehicleNotFoundError(f"Error: vehicle with ID '{booking.vehicle_id}' not found")

            updated = booking.evolve(status=BookingStatus.CANCELLED)
            if st.commit(booking.vehicle_id,
                         vehicle_version=vehicle.version,
                         vehicle_updates=vehicle.release(booking.seats_booked),
                         booking=updated.to_dict(),
                         booking_version=booking.version):
                logger.info("Booking %s cancelled by renter %s", booking.booking_id, actor_id)
                result = booking_from_dict(st.get_booking(booking.booking_id))
                NotificationService.notify("booking_cancelled", result.to_dict(), st.get_vehicle(booking.vehicle_id))
                return result
            logger.info("Lost cancel race on booking %s (attempt %d)", booking_id, attempt)

        raise ConcurrencyConflictError()
