import os
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
os.environ.setdefault("APP_ENV", "test")

import pytest

from rentmarket.config import TestConfig


@pytest.fixture(autouse=True)
def fake_store(monkeypatch):
    """
    Provide a clean in-memory store and patch services.common._store() so every
    service (and the request decorator) resolves the SAME object.
    """
    from rentmarket.models.store import Store
    from rentmarket.services import common as common_mod

    store = Store()
    monkeypatch.setattr(common_mod, "_store", lambda: store, raising=True)
    yield store


@pytest.fixture(autouse=True)
def quiet_notifications(monkeypatch):
    from rentmarket.services.notification_service import LogSender, NotificationService

    monkeypatch.setattr(NotificationService, "sender", LogSender())
    monkeypatch.setattr(NotificationService, "enabled", True)


@pytest.fixture
def directory(fake_store):
    from rentmarket.services.account_directory import AccountDirectory
    return AccountDirectory(fake_store)


@pytest.fixture
def owner(directory):
    return directory.register("Vehicle Owner", "owner@example.com", phone="0300-1111111").account_id


@pytest.fixture
def renter(directory):
    return directory.register("First Renter", "renter1@example.com", phone="0300-2222222").account_id


@pytest.fixture
def renter2(directory):
    return directory.register("Second Renter", "renter2@example.com", phone="0300-3333333").account_id


@pytest.fixture
def full_vehicle(owner, fake_store):
    """A full-rental Sedan at 100/hour."""
    from rentmarket.services.vehicle_service import VehicleService
    return VehicleService.create_vehicle(owner, {
        "name": "Toyota Corolla",
        "type": "Sedan",
        "location": "FME",
        "mode": "full",
        "price": 100,
    }, store=fake_store).vehicle_id


@pytest.fixture
def shared_vehicle(owner, fake_store):
    """A seat-shared Van (4 seats) at 50/seat."""
    from rentmarket.services.vehicle_service import VehicleService
    return VehicleService.create_vehicle(owner, {
        "name": "Suzuki APV",
        "type": "Van",
        "location": "H9/10",
        "mode": "shared",
        "price": 50,
    }, store=fake_store).vehicle_id


@pytest.fixture
def client():
    from rentmarket import create_app
    app = create_app(TestConfig)
    with app.test_client() as c:
        yield c
