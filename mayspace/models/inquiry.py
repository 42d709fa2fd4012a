from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mayspace.db.base import Base, CreatedAtMixin


class Inquiry(Base, CreatedAtMixin):
    """
    A message about a unit.

    Root inquiries have no parent; replies point at the inquiry they answer
    and always share its unit.
    """
    __tablename__ = "inquiries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    recipient_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    parent_inquiry_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("inquiries.id", ondelete="CASCADE"), nullable=True, index=True
    )

    unit: Mapped["Unit"] = relationship(back_populates="inquiries")
    sender: Mapped["User"] = relationship(
        back_populates="sent_inquiries", foreign_keys=[sender_user_id]
    )
    recipient: Mapped["User"] = relationship(
        back_populates="received_inquiries", foreign_keys=[recipient_user_id]
    )
    parent: Mapped[Optional["Inquiry"]] = relationship(
        back_populates="replies", remote_side=[id]
    )
    replies: Mapped[List["Inquiry"]] = relationship(
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [Inquiry.created_at, Inquiry.id],
    )

    @property
    def is_reply(self) -> bool:
        return self.parent_inquiry_id is not None
