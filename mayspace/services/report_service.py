"""
Admin Reporting Service
Read-only aggregates over users, units, bookings and inquiries
"""
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session, aliased

from mayspace.core.errors import ValidationError
from mayspace.models.booking import Booking, BookingStatus
from mayspace.models.inquiry import Inquiry
from mayspace.models.unit import Unit
from mayspace.models.user import User

RECENT_DAYS = 7
TOP_USERS_LIMIT = 5


def _count(db: Session, model, *criteria) -> int:
    return db.query(func.count(model.id)).filter(*criteria).scalar() or 0


def get_statistics(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    since = now - timedelta(days=RECENT_DAYS)

    status_counts = dict(
        db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
    )
    available = _count(db, Unit, Unit.is_available.is_(True))
    total_units = _count(db, Unit)

    top_users = (
        db.query(User.username, User.email, func.count(Unit.id).label("units_count"))
        .join(Unit, Unit.user_id == User.id)
        .group_by(User.id, User.username, User.email)
        .order_by(desc("units_count"), User.username)
        .limit(TOP_USERS_LIMIT)
        .all()
    )

    return {
        "totalUsers": _count(db, User),
        "totalUnits": total_units,
        "totalBookings": _count(db, Booking),
        "totalInquiries": _count(db, Inquiry),
        "bookingStatus": {s.value: status_counts.get(s, 0) for s in BookingStatus},
        "unitStatus": {
            "available": available,
            "unavailable": total_units - available,
        },
        "recentActivity": {
            "usersLast7Days": _count(db, User, User.created_at >= since),
            "unitsLast7Days": _count(db, Unit, Unit.created_at >= since),
            "bookingsLast7Days": _count(db, Booking, Booking.created_at >= since),
        },
        "topUsers": [
            {"username": username, "email": email, "units_count": units_count}
            for username, email, units_count in top_users
        ],
    }


def get_bookings_report(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[str] = None,
) -> List[dict]:
    renter = aliased(User)
    owner = aliased(User)

    query = (
        db.query(
            Booking,
            Unit.building_name,
            Unit.unit_number,
            Unit.location,
            renter.username,
            renter.email,
            owner.username,
            owner.email,
        )
        .join(Unit, Booking.unit_id == Unit.id)
        .join(renter, Booking.user_id == renter.id)
        .join(owner, Unit.user_id == owner.id)
    )

    if status and status != "all":
        try:
            query = query.filter(Booking.status == BookingStatus(status))
        except ValueError:
            raise ValidationError(f"Unknown booking status '{status}'")
    if start_date:
        query = query.filter(Booking.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(Booking.created_at < datetime.combine(end_date + timedelta(days=1), time.min))

    rows = query.order_by(desc(Booking.created_at), desc(Booking.id)).all()

    report = []
    for booking, building_name, unit_number, location, r_user, r_email, o_user, o_email in rows:
        data = booking.to_dict()
        data.update({
            "building_name": building_name,
            "unit_number": unit_number,
            "location": location,
            "renter_username": r_user,
            "renter_email": r_email,
            "owner_username": o_user,
            "owner_email": o_email,
        })
        report.append(data)
    return report


def get_users_report(db: Session) -> List[dict]:
    units_sq = (
        db.query(Unit.user_id, func.count(Unit.id).label("n"))
        .group_by(Unit.user_id).subquery()
    )
    bookings_sq = (
        db.query(Booking.user_id, func.count(Booking.id).label("n"))
        .group_by(Booking.user_id).subquery()
    )
    inquiries_sq = (
        db.query(Inquiry.sender_user_id.label("user_id"), func.count(Inquiry.id).label("n"))
        .group_by(Inquiry.sender_user_id).subquery()
    )

    rows = (
        db.query(
            User,
            func.coalesce(units_sq.c.n, 0),
            func.coalesce(bookings_sq.c.n, 0),
            func.coalesce(inquiries_sq.c.n, 0),
        )
        .outerjoin(units_sq, units_sq.c.user_id == User.id)
        .outerjoin(bookings_sq, bookings_sq.c.user_id == User.id)
        .outerjoin(inquiries_sq, inquiries_sq.c.user_id == User.id)
        .order_by(desc(User.created_at), desc(User.id))
        .all()
    )

    report = []
    for user, units_posted, bookings_made, inquiries_sent in rows:
        data = user.to_public_dict()
        data.update({
            "units_posted": units_posted,
            "bookings_made": bookings_made,
            "inquiries_sent": inquiries_sent,
        })
        report.append(data)
    return report
