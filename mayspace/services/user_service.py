"""
User management for the admin portal
"""
import logging
from typing import List

from sqlalchemy import desc
from sqlalchemy.orm import Session

from mayspace.core.errors import NotFoundError
from mayspace.models.unit import Unit
from mayspace.models.user import User
from mayspace.services.unit_service import release_images

logger = logging.getLogger(__name__)


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(desc(User.created_at), desc(User.id)).all()


def delete_user(db: Session, user_id: int) -> None:
    """
    Remove a user together with their units, bookings, inquiries and OTP codes.
    Image files of their units are removed after the rows are gone.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")

    image_paths = []
    for unit in db.query(Unit).filter(Unit.user_id == user_id).all():
        image_paths.extend(unit.images)

    db.delete(user)
    db.commit()

    removed = release_images(db, image_paths)
    logger.info(f"[ADMIN] Deleted user id={user_id}; removed {removed}/{len(image_paths)} image files")
