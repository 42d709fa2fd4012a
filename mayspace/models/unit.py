import json
import logging
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mayspace.db.base import Base, CreatedAtMixin

logger = logging.getLogger(__name__)


def parse_image_list(raw) -> List[str]:
    """Decode the stored images column; anything unreadable becomes an empty list."""
    if not raw:
        return []
    if isinstance(raw, list):
        return [str(p) for p in raw]
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error(f"[UNIT] Unreadable images column {raw!r}: {e}")
        return []
    return [str(p) for p in parsed] if isinstance(parsed, list) else []


class Unit(Base, CreatedAtMixin):
    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    building_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    specifications: Mapped[str] = mapped_column(Text, nullable=False)
    special_features: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_price: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    contact_person: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    # Ordered list of image references, stored as JSON text for portability
    images_json: Mapped[Optional[str]] = mapped_column("images", Text, nullable=True)

    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    owner: Mapped["User"] = relationship(back_populates="units")
    bookings: Mapped[List["Booking"]] = relationship(
        back_populates="unit", cascade="all, delete-orphan", passive_deletes=True
    )
    inquiries: Mapped[List["Inquiry"]] = relationship(
        back_populates="unit", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def images(self) -> List[str]:
        return parse_image_list(self.images_json)

    @images.setter
    def images(self, paths: List[str]) -> None:
        self.images_json = json.dumps(list(paths or []))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "building_name": self.building_name,
            "unit_number": self.unit_number,
            "location": self.location,
            "specifications": self.specifications,
            "special_features": self.special_features,
            "unit_price": self.unit_price,
            "contact_person": self.contact_person,
            "phone_number": self.phone_number,
            "images": self.images,
            "is_available": self.is_available,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
