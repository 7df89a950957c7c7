from .access_guard import AccessGuard
from .account_directory import AccountDirectory
from .booking_service import BookingService
from .notification_service import NotificationService
from .settlement_service import SettlementService
from .vehicle_service import VehicleService

__all__ = [
    "AccessGuard",
    "AccountDirectory",
    "BookingService",
    "NotificationService",
    "SettlementService",
    "VehicleService",
]
