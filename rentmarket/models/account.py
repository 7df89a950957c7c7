from dataclasses import dataclass


@dataclass
class Account:
    """
    The slice of a marketplace account the booking core needs. Registration,
    login and profile editing live elsewhere.
    """
    account_id: str
    full_name: str = ""
    email: str = ""
    phone: str = ""
    reg_no: str = ""
    location: str = ""
    total_earnings: float = 0.0

    def is_owner_of(self, vehicle) -> bool:
        return vehicle.is_owned_by(self.account_id)
