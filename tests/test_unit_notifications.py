from rentmarket.services.booking_service import BookingService
from rentmarket.services.notification_service import BaseSender, NotificationService


class RecordingSender(BaseSender):
    def __init__(self):
        self.sent = []

    def send(self, recipient_id, event, message):
        self.sent.append((recipient_id, event, message))


class BrokenSender(BaseSender):
    def send(self, recipient_id, event, message):
        raise ConnectionError("smtp down")


def test_booking_events_reach_renter_and_owner(monkeypatch, owner, renter, full_vehicle):
    sender = RecordingSender()
    monkeypatch.setattr(NotificationService, "sender", sender)

    b = BookingService.create_booking(renter_id=renter, vehicle_id=full_vehicle, duration=2, pickup_location="FME")

    assert {(r, e) for r, e, _ in sender.sent} == {(renter, "booking_created"), (owner, "booking_created")}
    assert "Toyota Corolla" in sender.sent[0][2]
    assert b.booking_id in sender.sent[0][2]


def test_delivery_failure_never_fails_the_booking(monkeypatch, fake_store, renter, full_vehicle, caplog):
    monkeypatch.setattr(NotificationService, "sender", BrokenSender())

    b = BookingService.create_booking(renter_id=renter, vehicle_id=full_vehicle, duration=2, pickup_location="FME")
    cancelled = BookingService.cancel_booking(b.booking_id, renter)

    assert cancelled.status == "cancelled"
    assert fake_store.vehicles[full_vehicle]["fully_available"] is True
    assert "failed" in caplog.text


def test_disabled_notifications_send_nothing(monkeypatch, renter, full_vehicle):
    sender = RecordingSender()
    monkeypatch.setattr(NotificationService, "sender", sender)
    monkeypatch.setattr(NotificationService, "enabled", False)

    BookingService.create_booking(renter_id=renter, vehicle_id=full_vehicle, duration=2, pickup_location="FME")
    assert sender.sent == []
