"""
User and Admin accounts

Admins live in their own table; there is no role column. Which table a
login matched decides the identity.
"""
from typing import List

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mayspace.db.base import Base, CreatedAtMixin


class User(Base, CreatedAtMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    contact_number: Mapped[str] = mapped_column(String(30), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)  # bcrypt hash

    units: Mapped[List["Unit"]] = relationship(
        back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
    bookings: Mapped[List["Booking"]] = relationship(
        back_populates="renter", cascade="all, delete-orphan", passive_deletes=True
    )
    sent_inquiries: Mapped[List["Inquiry"]] = relationship(
        back_populates="sender",
        foreign_keys="Inquiry.sender_user_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    received_inquiries: Mapped[List["Inquiry"]] = relationship(
        back_populates="recipient",
        foreign_keys="Inquiry.recipient_user_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    otp_codes: Mapped[List["OtpCode"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "contact_number": self.contact_number,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Admin(Base, CreatedAtMixin):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    contact_number: Mapped[str] = mapped_column(String(30), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "contact_number": self.contact_number,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
