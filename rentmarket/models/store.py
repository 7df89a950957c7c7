import atexit
import logging
import os
import pickle
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class Store:
    """
    In-memory document store for accounts, vehicles and bookings.

    Every record carries a ``version``. Records are replaced on write, never
    mutated in place, so a reader holding a record sees one consistent state.
    Writes that touch a vehicle or its bookings are serialized per vehicle;
    earnings credits per account. There is no store-wide data lock.

    With a ``path`` the whole store is pickled after every write (atomic
    replace) and reloaded on start; without one it is purely in-memory.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path) if path else None
        self.accounts: dict[str, dict] = {}
        self.vehicles: dict[str, dict] = {}
        self.bookings: dict[str, dict] = {}
        self._locks_guard = threading.Lock()
        self._vehicle_locks: dict[str, threading.Lock] = {}
        self._account_locks: dict[str, threading.Lock] = {}
        self._io = threading.Lock()

        if self.path:
            logger.info("Store using file: %s", self.path)
            self._load()
            # Automatically save on exit (skipped in test environments)
            if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
                atexit.register(self.save)
                Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path)
        return cls._inst

    # ---------- Locks ----------
    def _lock_for(self, table: dict, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = table.get(key)
            if lock is None:
                lock = table[key] = threading.Lock()
            return lock

    @contextmanager
    def vehicle_lock(self, vehicle_id: str):
        with self._lock_for(self._vehicle_locks, str(vehicle_id)):
            yield

    @contextmanager
    def account_lock(self, account_id: str):
        with self._lock_for(self._account_locks, str(account_id)):
            yield

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("Store load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            self.accounts = data.get("accounts", {}) or {}
            self.vehicles = data.get("vehicles", {}) or {}
            self.bookings = data.get("bookings", {}) or {}
            logger.info("Store loaded: accounts=%d, vehicles=%d, bookings=%d",
                        len(self.accounts), len(self.vehicles), len(self.bookings))
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            os.replace(self.path, bak)
            logger.warning("Incompatible store (%s); backed up to %s. Starting empty.",
                           type(data).__name__, bak)

    def _dump(self):
        """Write a snapshot of the store to the pickle file (atomic replace)."""
        if not self.path:
            return
        with self._io:
            payload = {
                "accounts": dict(self.accounts),
                "vehicles": dict(self.vehicles),
                "bookings": dict(self.bookings),
            }
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp = self.path + ".tmp"
            with open(tmp, "wb") as f:
                pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)

    def save(self):
        logger.info("Saving store to %s", self.path)
        self._dump()

    def clear(self):
        self.accounts.clear()
        self.vehicles.clear()
        self.bookings.clear()

    # ---------- Accounts ----------
    def create_account(self, data: dict) -> str:
        """Create a new account record and return its ID."""
        aid = str(data.get("account_id") or uuid.uuid4())
        self.accounts[aid] = {
            "account_id": aid,
            "full_name": data.get("full_name", ""),
            "email": (data.get("email") or "").lower(),
            "phone": data.get("phone", ""),
            "reg_no": data.get("reg_no", ""),
            "location": data.get("location", ""),
            "total_earnings": float(data.get("total_earnings") or 0),
            "created_at": _now_iso(),
            "version": 1,
        }
        self._dump()
        return aid

    def get_account(self, account_id: str) -> dict | None:
        return self.accounts.get(str(account_id))

    def _credit(self, aid: str, amount: float) -> bool:
        acc = self.accounts.get(aid)
        if acc is None:
            return False
        self.accounts[aid] = {
            **acc,
            "total_earnings": round(float(acc.get("total_earnings") or 0) + amount, 2),
            "version": acc.get("version", 0) + 1,
        }
        return True

    # ---------- Vehicles ----------
    def create_vehicle(self, data: dict) -> str:
        """Create a new vehicle record and return its ID."""
        vid = str(uuid.uuid4())
        now = _now_iso()
        self.vehicles[vid] = {**data, "vehicle_id": vid, "created_at": now, "updated_at": now, "version": 1}
        self._dump()
        return vid

    def get_vehicle(self, vehicle_id: str) -> dict | None:
        """Get vehicle record by ID."""
        return self.vehicles.get(str(vehicle_id))

    def replace_vehicle(self, vehicle_id: str, expected_version: int, record: dict) -> bool:
        """Swap in a whole new vehicle record if nobody wrote it since expected_version."""
        vid = str(vehicle_id)
        with self.vehicle_lock(vid):
            cur = self.vehicles.get(vid)
            if cur is None or cur.get("version") != expected_version:
                return False
            self.vehicles[vid] = {**record, "vehicle_id": vid, "updated_at": _now_iso(),
                                  "version": expected_version + 1}
        self._dump()
        return True

    def delete_vehicle(self, vehicle_id: str, expected_version: int) -> bool:
        """Delete a vehicle if it is still at expected_version."""
        vid = str(vehicle_id)
        with self.vehicle_lock(vid):
            cur = self.vehicles.get(vid)
            if cur is None or cur.get("version") != expected_version:
                return False
            del self.vehicles[vid]
        self._dump()
        return True

    # ---------- Bookings ----------
    def get_booking(self, booking_id: str) -> dict | None:
        return self.bookings.get(str(booking_id))

    def bookings_where(self, predicate) -> list[dict]:
        return [b for b in list(self.bookings.values()) if predicate(b)]

    def commit(
            self,
            vehicle_id: str,
            *,
            vehicle_version: int | None = None,
            vehicle_updates: dict | None = None,
            booking: dict | None = None,
            booking_version: int | None = None,
            credit: tuple[str, float] | None = None,
    ) -> bool:
        """
        Apply a vehicle update, a booking write and an earnings credit as one unit.

        - vehicle_updates are applied only if the vehicle is still at vehicle_version.
        - booking is inserted when booking_version is None (new booking); otherwise
          it replaces the stored booking only if that is still at booking_version.
        - credit=(account_id, amount) is added to the account's earnings.

        Returns False and writes nothing if any version check fails.
        """
        vid = str(vehicle_id)
        with self.vehicle_lock(vid):
            cur_vehicle = self.vehicles.get(vid)
            if vehicle_updates is not None:
                if cur_vehicle is None or cur_vehicle.get("version") != vehicle_version:
                    return False

            bid = None
            if booking is not None:
                bid = str(booking.get("booking_id") or uuid.uuid4())
                stored = self.bookings.get(bid)
                if booking_version is None:
                    if stored is not None:
                        return False
                elif stored is None or stored.get("version") != booking_version:
                    return False

            now = _now_iso()
            if vehicle_updates is not None:
                self.vehicles[vid] = {**cur_vehicle, **vehicle_updates, "updated_at": now,
                                      "version": vehicle_version + 1}
            if booking is not None:
                self.bookings[bid] = {**booking, "booking_id": bid, "updated_at": now,
                                      "version": (booking_version or 0) + 1}
            if credit is not None:
                aid, amount = credit
                with self.account_lock(aid):
                    if not self._credit(str(aid), amount):
                        logger.warning("Earnings credit skipped: account %s not found", aid)
        self._dump()
        return True
