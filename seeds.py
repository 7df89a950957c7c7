from rentmarket import create_app
from rentmarket.models.store import Store
from rentmarket.services.account_directory import AccountDirectory
from rentmarket.services.vehicle_service import VehicleService


def ensure_account(directory: AccountDirectory, full_name: str, email: str, phone: str):
    """
    Ensure an account with `email` exists in the store (idempotent).
    Returns its ID.
    """
    for acc in directory.store.accounts.values():
        if acc.get("email") == email.lower():
            return acc["account_id"]
    return directory.register(full_name, email, phone=phone).account_id


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()
        directory = AccountDirectory(store)

        # ---- Demo owner / renter accounts ----
        owner = ensure_account(directory, "Demo Owner", "owner@example.com", "0300-0000001")
        ensure_account(directory, "Demo Renter", "renter@example.com", "0300-0000002")

        # ---- Demo vehicles (create only if none exist) ----
        if not store.vehicles:
            VehicleService.create_vehicle(owner, {
                "name": "Toyota Corolla", "type": "Sedan", "location": "FME",
                "mode": "full", "price": 450, "features": ["AC", "Automatic"],
            }, store=store)
            VehicleService.create_vehicle(owner, {
                "name": "Suzuki APV", "type": "Van", "location": "H9/10",
                "mode": "shared", "price": 150,
            }, store=store)
            VehicleService.create_vehicle(owner, {
                "name": "Honda CD 70", "type": "Bike", "location": "AcB",
                "mode": "full", "price": 120, "max_duration": 8,
            }, store=store)

        store.save()

        print("Seed complete.")
        print("Owner account:  ", owner)


if __name__ == "__main__":
    main()
