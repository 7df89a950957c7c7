"""
Custom exception classes for the rental marketplace.

Services raise these; the HTTP layer catches the common base class and renders
the message with the status code each error carries.
"""


class MarketplaceError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 400
    default_message = "Error: request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class NotFoundError(MarketplaceError):
    """Raised when a referenced record does not exist."""

    status_code = 404
    default_message = "Error: not found"


class VehicleNotFoundError(NotFoundError):
    """Raised when a vehicle ID cannot be found in the system."""

    default_message = "Error: vehicle not found"


class BookingNotFoundError(NotFoundError):
    """Raised when a booking record cannot be found in the system."""

    default_message = "Error: booking not found"


class AccountNotFoundError(NotFoundError):
    """Raised when an account ID cannot be found in the directory."""

    default_message = "Error: account not found"


class SelfRentalError(MarketplaceError):
    """Raised when an owner tries to book their own vehicle."""

    default_message = "You cannot rent your own vehicle"


class CapacityExceededError(MarketplaceError):
    """Raised when a vehicle has no free capacity for the request."""

    status_code = 409
    default_message = "Vehicle is already booked"


class ForbiddenError(MarketplaceError):
    """Raised when the acting account may not perform the mutation."""

    status_code = 403
    default_message = "Not authorized"


class InvalidStateError(MarketplaceError):
    """Raised when a booking or vehicle is in the wrong state for the request."""

    default_message = "Error: operation not allowed in the current state"


class ValidationError(MarketplaceError):
    """Raised for malformed or out-of-range input."""

    default_message = "Error: invalid input"


class UnauthorizedError(MarketplaceError):
    """Raised when a request carries no known acting account."""

    status_code = 401
    default_message = "Authentication required"


class ConcurrencyConflictError(MarketplaceError):
    """Raised when a write keeps losing races against concurrent updates."""

    status_code = 409
    default_message = "Record changed concurrently, please retry"
