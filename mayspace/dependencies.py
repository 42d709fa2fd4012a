"""
Request identity

X-User-ID / X-Admin-ID are bare ids set by the web client after login. They
are not verified tokens and only stand in for a real session mechanism.
"""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from mayspace.core.errors import UnauthorizedError
from mayspace.database import get_db
from mayspace.models.user import Admin, User

logger = logging.getLogger(__name__)


def _parse_id(raw: Optional[str], header_name: str) -> int:
    if not raw:
        raise UnauthorizedError(f"Unauthorized: {header_name} not provided. Please log in.")
    try:
        return int(raw)
    except ValueError:
        raise UnauthorizedError(f"Unauthorized: invalid {header_name}")


def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    db: Session = Depends(get_db),
) -> User:
    user_id = _parse_id(x_user_id, "X-User-ID")
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.warning(f"[AUTH] X-User-ID {user_id} does not match any user")
        raise UnauthorizedError("Unauthorized: unknown user")
    return user


def get_current_admin(
    x_admin_id: Optional[str] = Header(None, alias="X-Admin-ID"),
    db: Session = Depends(get_db),
) -> Admin:
    admin_id = _parse_id(x_admin_id, "X-Admin-ID")
    admin = db.query(Admin).filter(Admin.id == admin_id).first()
    if admin is None:
        logger.warning(f"[AUTH] X-Admin-ID {admin_id} does not match any admin")
        raise UnauthorizedError("Unauthorized: unknown admin")
    return admin
