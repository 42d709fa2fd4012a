import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from conftest import user_headers
from mayspace.core.errors import ConflictError
from mayspace.db.base import Base
from mayspace.models.booking import Booking, BookingStatus
from mayspace.models.unit import Unit
from mayspace.models.user import User
from mayspace.services import booking_service


@pytest.fixture()
def listing(make_user, make_unit):
    owner = make_user("owner")
    unit = make_unit(owner)
    return owner, unit["id"]


def set_status(client, booking_id, status, acting_user):
    return client.put(
        f"/bookings/{booking_id}/status",
        json={"status": status},
        headers=user_headers(acting_user),
    )


def unit_available(client, unit_id):
    units = client.get("/public/units").json()["units"]
    return next(u for u in units if u["id"] == unit_id)["is_available"]


def test_create_booking_is_pending(make_user, make_booking, listing):
    owner, unit_id = listing
    renter = make_user("renter")

    response = make_booking(renter, unit_id, transaction="Walk-in", numberOfPeople=3)
    assert response.status_code == 201
    booking = response.json()["booking"]
    assert booking["status"] == "pending"
    assert booking["user_id"] == renter
    assert booking["transaction_type"] == "walk-in"
    assert booking["number_of_people"] == 3
    assert booking["date_of_visiting"] == "2026-11-02"


def test_booking_validation(make_user, make_booking, listing):
    _, unit_id = listing
    renter = make_user("renter")
    assert make_booking(renter, unit_id, numberOfPeople=0).status_code == 400
    assert make_booking(renter, unit_id, transaction="carrier pigeon").status_code == 400
    assert make_booking(renter, unit_id, dateVisiting="not-a-date").status_code == 400


def test_booking_unknown_unit(make_user, make_booking):
    renter = make_user("renter")
    assert make_booking(renter, 999).status_code == 404


def test_cannot_book_own_unit(make_booking, listing):
    owner, unit_id = listing
    response = make_booking(owner, unit_id)
    assert response.status_code == 409
    assert response.json()["message"] == "You cannot book your own unit."


def test_one_active_booking_per_renter(client, make_user, make_booking, listing):
    owner, unit_id = listing
    renter = make_user("renter")

    first = make_booking(renter, unit_id)
    assert first.status_code == 201
    assert make_booking(renter, unit_id).status_code == 409

    # Denied bookings no longer block a new request
    set_status(client, first.json()["booking"]["id"], "denied", owner)
    assert make_booking(renter, unit_id).status_code == 201


def test_confirm_denies_other_pending(client, make_user, make_booking, listing):
    owner, unit_id = listing
    ids = []
    for name in ("alice", "bob", "carol"):
        renter = make_user(name)
        ids.append(make_booking(renter, unit_id).json()["booking"]["id"])

    response = set_status(client, ids[1], "confirmed", owner)
    assert response.status_code == 200
    assert response.json()["message"] == "Booking confirmed"
    assert response.json()["booking"]["status"] == "confirmed"

    rented = client.get("/bookings/rented", headers=user_headers(owner)).json()["bookings"]
    statuses = {b["id"]: b["status"] for b in rented}
    assert statuses == {ids[0]: "denied", ids[1]: "confirmed", ids[2]: "denied"}
    assert unit_available(client, unit_id) is False


def test_no_new_booking_on_confirmed_unit(client, make_user, make_booking, listing):
    owner, unit_id = listing
    alice = make_user("alice")
    bob = make_user("bob")
    booking_id = make_booking(alice, unit_id).json()["booking"]["id"]
    set_status(client, booking_id, "confirmed", owner)

    response = make_booking(bob, unit_id)
    assert response.status_code == 409


def test_cannot_confirm_second_booking(client, make_user, make_booking, listing, db_session):
    owner, unit_id = listing
    alice = make_user("alice")
    bob = make_user("bob")
    first = make_booking(alice, unit_id).json()["booking"]["id"]
    second = make_booking(bob, unit_id).json()["booking"]["id"]

    set_status(client, first, "confirmed", owner)
    # second was auto-denied; denied is terminal
    response = set_status(client, second, "confirmed", owner)
    assert response.status_code == 409

    confirmed = db_session.query(Booking).filter(
        Booking.unit_id == unit_id, Booking.status == BookingStatus.CONFIRMED
    ).count()
    assert confirmed == 1


def test_deny_confirmed_reopens_unit(client, make_user, make_booking, listing):
    owner, unit_id = listing
    alice = make_user("alice")
    bob = make_user("bob")
    booking_id = make_booking(alice, unit_id).json()["booking"]["id"]

    set_status(client, booking_id, "confirmed", owner)
    assert unit_available(client, unit_id) is False

    response = set_status(client, booking_id, "denied", owner)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "denied"
    assert unit_available(client, unit_id) is True

    # The unit can be booked and confirmed again
    new_id = make_booking(bob, unit_id).json()["booking"]["id"]
    assert set_status(client, new_id, "confirmed", owner).status_code == 200


def test_deny_pending_keeps_unit_available(client, make_user, make_booking, listing):
    owner, unit_id = listing
    alice = make_user("alice")
    booking_id = make_booking(alice, unit_id).json()["booking"]["id"]

    response = set_status(client, booking_id, "denied", owner)
    assert response.status_code == 200
    assert unit_available(client, unit_id) is True


def test_confirm_twice_is_idempotent(client, make_user, make_booking, listing):
    owner, unit_id = listing
    alice = make_user("alice")
    booking_id = make_booking(alice, unit_id).json()["booking"]["id"]

    assert set_status(client, booking_id, "confirmed", owner).status_code == 200
    response = set_status(client, booking_id, "confirmed", owner)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "confirmed"


def test_status_update_rules(client, make_user, make_booking, listing):
    owner, unit_id = listing
    alice = make_user("alice")
    booking_id = make_booking(alice, unit_id).json()["booking"]["id"]

    assert set_status(client, booking_id, "cancelled", owner).status_code == 400
    assert set_status(client, booking_id, "pending", owner).status_code == 400
    assert set_status(client, booking_id, "confirmed", alice).status_code == 403
    assert set_status(client, 999, "confirmed", owner).status_code == 404


def test_my_and_rented_bookings(client, make_user, make_booking, listing):
    owner, unit_id = listing
    alice = make_user("alice")
    make_booking(alice, unit_id)

    mine = client.get("/bookings/my", headers=user_headers(alice)).json()["bookings"]
    assert len(mine) == 1
    assert mine[0]["building_name"] == "Sunrise Tower"
    assert mine[0]["unit_number"] == "12B"
    assert mine[0]["location"] == "Makati"

    assert client.get("/bookings/my", headers=user_headers(owner)).json()["bookings"] == []
    rented = client.get("/bookings/rented", headers=user_headers(owner)).json()["bookings"]
    assert [b["user_id"] for b in rented] == [alice]
    assert client.get("/bookings/rented", headers=user_headers(alice)).json()["bookings"] == []


def test_index_rejects_second_confirmed_booking(db_session, make_user, listing):
    _, unit_id = listing
    alice = make_user("alice")
    bob = make_user("bob")

    def confirmed(user_id):
        return Booking(
            unit_id=unit_id,
            user_id=user_id,
            name="x",
            address="y",
            contact_number="0917",
            number_of_people=1,
            date_of_visiting=date(2026, 11, 2),
            status=BookingStatus.CONFIRMED,
        )

    db_session.add(confirmed(alice))
    db_session.commit()

    db_session.add(confirmed(bob))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_index_rejects_duplicate_active_booking(db_session, make_user, listing):
    _, unit_id = listing
    alice = make_user("alice")

    for _ in range(2):
        db_session.add(Booking(
            unit_id=unit_id,
            user_id=alice,
            name="x",
            address="y",
            contact_number="0917",
            number_of_people=1,
            date_of_visiting=date(2026, 11, 2),
        ))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert db_session.query(Unit).filter(Unit.id == unit_id).one().is_available is True


@pytest.fixture()
def locking_session_factory(tmp_path):
    """
    File-backed SQLite where every transaction starts with BEGIN IMMEDIATE,
    so concurrent sessions serialize the way a row lock makes them on a
    server database.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'locking.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def test_concurrent_confirms_allow_only_one(locking_session_factory):
    setup = locking_session_factory()
    owner = User(name="Owner", username="owner", email="owner@example.com", contact_number="1", password="x")
    renters = [
        User(name=n, username=n, email=f"{n}@example.com", contact_number="1", password="x")
        for n in ("alice", "bob")
    ]
    setup.add_all([owner, *renters])
    setup.flush()
    unit = Unit(user_id=owner.id, building_name="B", unit_number="1", specifications="s")
    setup.add(unit)
    setup.flush()
    bookings = [
        Booking(
            unit_id=unit.id,
            user_id=renter.id,
            name=renter.name,
            address="a",
            contact_number="1",
            number_of_people=1,
            date_of_visiting=date(2026, 11, 2),
        )
        for renter in renters
    ]
    setup.add_all(bookings)
    setup.commit()
    owner_id, unit_id = owner.id, unit.id
    booking_ids = [b.id for b in bookings]
    setup.close()

    barrier = threading.Barrier(2)

    def confirm(booking_id):
        db = locking_session_factory()
        try:
            barrier.wait()
            booking_service.set_booking_status(db, booking_id, "confirmed", owner_id)
            return "confirmed"
        except ConflictError:
            return "conflict"
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(confirm, booking_ids))

    assert sorted(results) == ["confirmed", "conflict"]

    check = locking_session_factory()
    statuses = sorted(b.status.value for b in check.query(Booking).filter(Booking.unit_id == unit_id))
    assert statuses == ["confirmed", "denied"]
    assert check.get(Unit, unit_id).is_available is False
    check.close()
