# rentmarket/utils/constants.py

"""
Global constants for booking/payment statuses, vehicle modes and allowed values.
These constants are imported by both models and services.
"""


class BookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus:
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


class VehicleMode:
    FULL = "full"
    SHARED = "shared"


# Forward order of the main booking line; cancelled sits outside it.
STATUS_ORDER = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.IN_PROGRESS,
    BookingStatus.COMPLETED,
)
ALL_STATUSES = set(STATUS_ORDER) | {BookingStatus.CANCELLED}
TERMINAL_STATUSES = {BookingStatus.COMPLETED, BookingStatus.CANCELLED}
CANCELLABLE_STATUSES = {BookingStatus.PENDING, BookingStatus.CONFIRMED}
# Bookings in these states hold capacity on their vehicle.
OPEN_STATUSES = {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
PAYMENT_STATUSES = {PaymentStatus.UNPAID, PaymentStatus.PAID, PaymentStatus.REFUNDED}

# --- Capacity ---
SEAT_CAPACITY = 4
DEFAULT_MAX_DURATION = 24  # hours
DEFAULT_RATING = 5.0
MAX_RATING = 5

# A lost compare-and-set on create is retried once before reporting no capacity.
CLAIM_ATTEMPTS = 2
RELEASE_ATTEMPTS = 10

# --- Misc ---
VEHICLE_TYPES = {"Sedan", "SUV", "Electric", "Hatchback", "Van", "Bike", "Truck", "Coupe"}
LOCATIONS = ("FME", "FCSE", "AcB", "FMCE", "H11/12", "Brabers", "H9/10", "H1/2", "H5/6", "H3/4")
PLACEHOLDER = "/static/images/placeholder.png"
