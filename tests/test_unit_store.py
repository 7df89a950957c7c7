from rentmarket.models.store import Store


def seed(store):
    aid = store.create_account({"full_name": "Owner", "email": "O@Example.com"})
    vid = store.create_vehicle({"owner_id": aid, "mode": "shared", "seats_available": 4, "seat_capacity": 4})
    return aid, vid


def test_commit_writes_vehicle_booking_and_credit_together():
    store = Store()
    aid, vid = seed(store)

    ok = store.commit(vid, vehicle_version=1, vehicle_updates={"seats_available": 3},
                      booking={"booking_id": "b1", "vehicle_id": vid}, credit=(aid, 12.5))

    assert ok
    assert store.vehicles[vid]["seats_available"] == 3
    assert store.vehicles[vid]["version"] == 2
    assert store.bookings["b1"]["version"] == 1
    assert store.accounts[aid]["total_earnings"] == 12.5
    assert store.accounts[aid]["email"] == "o@example.com"


def test_stale_vehicle_version_writes_nothing():
    store = Store()
    aid, vid = seed(store)

    ok = store.commit(vid, vehicle_version=7, vehicle_updates={"seats_available": 0},
                      booking={"booking_id": "b1", "vehicle_id": vid}, credit=(aid, 10))

    assert not ok
    assert store.vehicles[vid]["seats_available"] == 4
    assert not store.bookings
    assert store.accounts[aid]["total_earnings"] == 0


def test_stale_booking_version_writes_nothing():
    store = Store()
    _, vid = seed(store)
    store.commit(vid, booking={"booking_id": "b1", "vehicle_id": vid, "status": "pending"})
    store.commit(vid, booking={"booking_id": "b1", "vehicle_id": vid, "status": "confirmed"}, booking_version=1)

    ok = store.commit(vid, vehicle_version=1, vehicle_updates={"seats_available": 4},
                      booking={"booking_id": "b1", "vehicle_id": vid, "status": "cancelled"}, booking_version=1)

    assert not ok
    assert store.bookings["b1"]["status"] == "confirmed"
    assert store.vehicles[vid]["version"] == 1


def test_credit_to_missing_account_still_commits(caplog):
    store = Store()
    _, vid = seed(store)

    ok = store.commit(vid, vehicle_version=1, vehicle_updates={"seats_available": 3},
                      booking={"booking_id": "b1", "vehicle_id": vid}, credit=("gone", 50.0))

    assert ok
    assert store.vehicles[vid]["seats_available"] == 3
    assert "b1" in store.bookings
    assert "gone" not in store.accounts
    assert "credit skipped" in caplog.text


def test_new_booking_id_must_be_unused():
    store = Store()
    _, vid = seed(store)
    assert store.commit(vid, booking={"booking_id": "b1", "vehicle_id": vid})
    assert not store.commit(vid, booking={"booking_id": "b1", "vehicle_id": vid})


def test_records_are_replaced_not_mutated():
    store = Store()
    _, vid = seed(store)
    before = store.get_vehicle(vid)
    store.commit(vid, vehicle_version=1, vehicle_updates={"seats_available": 2})
    assert before["seats_available"] == 4
    assert store.get_vehicle(vid)["seats_available"] == 2


def test_persists_to_file_and_reloads(tmp_path):
    path = tmp_path / "data.pkl"
    store = Store(path)
    aid, vid = seed(store)
    store.commit(vid, vehicle_version=1, vehicle_updates={"seats_available": 1})

    reloaded = Store(path)
    assert reloaded.get_account(aid)["full_name"] == "Owner"
    assert reloaded.get_vehicle(vid)["seats_available"] == 1


def test_incompatible_file_is_backed_up(tmp_path):
    import pickle

    path = tmp_path / "data.pkl"
    path.write_bytes(pickle.dumps(["not", "a", "dict"]))

    store = Store(path)
    assert store.vehicles == {}
    assert (tmp_path / "data.pkl.bak").exists()
