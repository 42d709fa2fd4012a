"""
Booking Model - reservation requests against a unit
"""
from datetime import date
import enum

from sqlalchemy import Date, Enum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mayspace.db.base import Base, CreatedAtMixin


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DENIED = "denied"


class TransactionType(str, enum.Enum):
    WALK_IN = "walk-in"
    ONLINE = "online"


ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Booking(Base, CreatedAtMixin):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Renter details
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    contact_number: Mapped[str] = mapped_column(String(30), nullable=False)
    number_of_people: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(
            TransactionType,
            name="transaction_type",
            values_callable=_enum_values,
            native_enum=False,
            length=20,
        ),
        default=TransactionType.ONLINE,
        nullable=False,
    )
    date_of_visiting: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=_enum_values,
            native_enum=False,
            length=20,
        ),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )

    unit: Mapped["Unit"] = relationship(back_populates="bookings")
    renter: Mapped["User"] = relationship(back_populates="bookings")

    __table_args__ = (
        # Partial indexes back the booking invariants under concurrent writers.
        # MySQL has no partial indexes; there the unit row lock is the only guard.
        Index(
            "uq_bookings_one_confirmed_per_unit",
            "unit_id",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ).ddl_if(dialect=("sqlite", "postgresql")),
        Index(
            "uq_bookings_one_active_per_renter",
            "unit_id",
            "user_id",
            unique=True,
            sqlite_where=text("status IN ('pending', 'confirmed')"),
            postgresql_where=text("status IN ('pending', 'confirmed')"),
        ).ddl_if(dialect=("sqlite", "postgresql")),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "user_id": self.user_id,
            "name": self.name,
            "address": self.address,
            "contact_number": self.contact_number,
            "number_of_people": self.number_of_people,
            "transaction_type": self.transaction_type.value if self.transaction_type else None,
            "date_of_visiting": self.date_of_visiting.isoformat() if self.date_of_visiting else None,
            "status": self.status.value if self.status else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
