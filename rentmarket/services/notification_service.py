"""
Fire-and-forget booking notifications.

Senders are pluggable; a delivery failure is logged and never reaches the
booking operation that triggered it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)

MESSAGES = {
    "booking_created": "New booking {booking_id} for {vehicle_name}: {seats_booked} seat(s), total {total_cost}",
    "booking_updated": "Booking {booking_id} is now {status} (payment {payment_status})",
    "booking_cancelled": "Booking {booking_id} for {vehicle_name} was cancelled",
}


class BaseSender(ABC):
    """Base class for notification senders."""

    @abstractmethod
    def send(self, recipient_id: str, event: str, message: str) -> None:
        pass


class LogSender(BaseSender):
    """Writes notifications to the log; the default when no transport is configured."""

    def send(self, recipient_id, event, message):
        logger.info("notify %s [%s]: %s", recipient_id, event, message)


class NotificationService:
    sender: Optional[BaseSender] = LogSender()
    enabled = True

    @classmethod
    def configure(cls, sender: Optional[BaseSender] = None, enabled: bool = True) -> None:
        if sender is not None:
            cls.sender = sender
        cls.enabled = enabled

    @classmethod
    def notify(cls, event: str, booking: dict, vehicle: Optional[dict] = None) -> bool:
        """Tell the renter and the vehicle owner about a booking event. Returns delivery success."""
        if not cls.enabled or cls.sender is None:
            return False
        vehicle = vehicle or {}
        context = {**booking, "vehicle_name": vehicle.get("name", booking.get("vehicle_id"))}
        recipients = [r for r in (booking.get("renter_id"), vehicle.get("owner_id")) if r]
        delivered = True
        for recipient in recipients:
            try:
                message = MESSAGES.get(event, event).format(**context)
                cls.sender.send(recipient, event, message)
            except Exception:
                delivered = False
                logger.exception("Notification %s to %s failed for booking %s",
                                 event, recipient, booking.get("booking_id"))
        return delivered
