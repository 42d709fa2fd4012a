"""
Booking Service
Booking requests and the owner-driven confirm / deny state machine.

Invariants:
- at most one confirmed booking per unit
- at most one pending-or-confirmed booking per (unit, renter)

Every check-then-write sequence locks the unit row first, and the partial
unique indexes on ``bookings`` reject whatever slips through on commit.
"""
import logging
from typing import List

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from mayspace.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from mayspace.models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from mayspace.models.unit import Unit
from mayspace.schemas.booking import BookingCreate

logger = logging.getLogger(__name__)

SETTABLE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.DENIED)


def _lock_unit(db: Session, unit_id: int) -> Unit:
    unit = db.query(Unit).filter(Unit.id == unit_id).with_for_update().first()
    if not unit:
        raise NotFoundError("Unit not found")
    return unit


def _commit_or_conflict(db: Session, message: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[BOOKING] Constraint rejected write: {e.orig}")
        raise ConflictError(message)


def _confirmed_booking(db: Session, unit_id: int, exclude_id: int = None):
    query = db.query(Booking).filter(
        Booking.unit_id == unit_id,
        Booking.status == BookingStatus.CONFIRMED,
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.first()


def create_booking(db: Session, user_id: int, data: BookingCreate) -> Booking:
    unit = _lock_unit(db, data.unit_id)

    if unit.user_id == user_id:
        raise ConflictError("You cannot book your own unit.")

    if _confirmed_booking(db, unit.id):
        raise ConflictError("This unit already has a confirmed booking.")

    active = (
        db.query(Booking)
        .filter(
            Booking.unit_id == unit.id,
            Booking.user_id == user_id,
            Booking.status.in_(ACTIVE_STATUSES),
        )
        .first()
    )
    if active:
        raise ConflictError("You already have an active booking for this unit.")

    booking = Booking(
        unit_id=unit.id,
        user_id=user_id,
        name=data.name,
        address=data.address,
        contact_number=data.contact_number,
        number_of_people=data.number_of_people,
        transaction_type=data.transaction,
        date_of_visiting=data.date_visiting,
        status=BookingStatus.PENDING,
    )
    db.add(booking)
    _commit_or_conflict(db, "This unit cannot be booked right now.")
    db.refresh(booking)
    logger.info(f"[BOOKING] user id={user_id} requested unit id={unit.id} (booking id={booking.id})")
    return booking


def set_booking_status(db: Session, booking_id: int, new_status: str, acting_user_id: int) -> Booking:
    """
    Confirm or deny a booking on behalf of the unit owner.

    pending -> confirmed   unit becomes unavailable, other pending bookings are denied
    pending -> denied      no side effect
    confirmed -> denied    unit is reopened
    denied is terminal.
    """
    try:
        target = BookingStatus(new_status)
    except ValueError:
        target = None
    if target not in SETTABLE_STATUSES:
        raise ValidationError("Status must be 'confirmed' or 'denied'")

    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")

    unit = _lock_unit(db, booking.unit_id)
    if unit.user_id != acting_user_id:
        raise ForbiddenError("Not authorized to update this booking")

    # Re-read under the unit lock
    db.refresh(booking)
    previous = booking.status

    if previous == BookingStatus.DENIED:
        raise ConflictError("This booking has already been denied")
    if previous == target:
        return booking

    if target == BookingStatus.CONFIRMED:
        if _confirmed_booking(db, unit.id, exclude_id=booking.id):
            raise ConflictError("Another booking for this unit is already confirmed")

        denied = (
            db.query(Booking)
            .filter(
                Booking.unit_id == unit.id,
                Booking.id != booking.id,
                Booking.status == BookingStatus.PENDING,
            )
            .update({Booking.status: BookingStatus.DENIED}, synchronize_session="fetch")
        )
        booking.status = BookingStatus.CONFIRMED
        unit.is_available = False
        logger.info(
            f"[BOOKING] Confirmed booking id={booking.id} on unit id={unit.id}; "
            f"auto-denied {denied} pending booking(s)"
        )
    else:
        booking.status = BookingStatus.DENIED
        if previous == BookingStatus.CONFIRMED:
            unit.is_available = True
            logger.info(f"[BOOKING] Denied confirmed booking id={booking.id}; unit id={unit.id} reopened")
        else:
            logger.info(f"[BOOKING] Denied pending booking id={booking.id}")

    _commit_or_conflict(db, "Another booking for this unit is already confirmed")
    db.refresh(booking)
    return booking


def _with_unit_fields(booking: Booking) -> dict:
    data = booking.to_dict()
    data["building_name"] = booking.unit.building_name
    data["unit_number"] = booking.unit.unit_number
    data["location"] = booking.unit.location
    return data


def list_my_bookings(db: Session, user_id: int) -> List[dict]:
    """Bookings the user made, newest first."""
    bookings = (
        db.query(Booking)
        .options(joinedload(Booking.unit))
        .filter(Booking.user_id == user_id)
        .order_by(desc(Booking.created_at), desc(Booking.id))
        .all()
    )
    return [_with_unit_fields(b) for b in bookings]


def list_rented_bookings(db: Session, owner_id: int) -> List[dict]:
    """Bookings placed on units the user owns, newest first."""
    bookings = (
        db.query(Booking)
        .join(Unit, Booking.unit_id == Unit.id)
        .options(joinedload(Booking.unit))
        .filter(Unit.user_id == owner_id)
        .order_by(desc(Booking.created_at), desc(Booking.id))
        .all()
    )
    return [_with_unit_fields(b) for b in bookings]
