"""
Unit Listing Service
CRUD over units with ownership checks and image file cleanup
"""
import logging
from typing import List, Optional

from sqlalchemy import desc, or_
from sqlalchemy.orm import Session, joinedload

from mayspace.core.errors import ForbiddenError, NotFoundError
from mayspace.models.unit import Unit
from mayspace.schemas.unit import UnitIn
from mayspace.utils import file_storage

logger = logging.getLogger(__name__)


def _apply_fields(unit: Unit, data: UnitIn) -> None:
    unit.building_name = data.building_name
    unit.unit_number = data.unit_number
    unit.specifications = data.specifications
    unit.location = data.location
    unit.special_features = data.special_features
    unit.unit_price = data.unit_price
    unit.contact_person = data.contact_person
    unit.phone_number = data.phone_number


def get_unit(db: Session, unit_id: int) -> Unit:
    unit = db.query(Unit).filter(Unit.id == unit_id).first()
    if not unit:
        raise NotFoundError("Unit not found")
    return unit


def get_owned_unit(db: Session, unit_id: int, user_id: int) -> Unit:
    unit = get_unit(db, unit_id)
    if unit.user_id != user_id:
        raise ForbiddenError("Unit does not belong to this user")
    return unit


def release_images(db: Session, image_paths: List[str]) -> int:
    """
    Remove image files that no remaining unit references.
    Call after the commit that dropped them.
    """
    orphaned = [
        path for path in image_paths
        if not db.query(Unit.id).filter(Unit.images_json.contains(path, autoescape=True)).first()
    ]
    kept = len(image_paths) - len(orphaned)
    if kept:
        logger.warning(f"[UNIT] Kept {kept} image file(s) still referenced by another unit")
    return file_storage.delete_images(orphaned)


def create_unit(db: Session, owner_id: int, data: UnitIn) -> Unit:
    # A new unit owns no files yet, so every image must be an upload
    image_paths = file_storage.store_images(data.images)
    unit = Unit(user_id=owner_id, is_available=True)
    _apply_fields(unit, data)
    unit.images = image_paths
    db.add(unit)
    try:
        db.commit()
    except Exception:
        db.rollback()
        file_storage.delete_images(image_paths)
        raise
    db.refresh(unit)
    logger.info(f"[UNIT] Created unit id={unit.id} for user id={owner_id}")
    return unit


def list_user_units(db: Session, owner_id: int) -> List[Unit]:
    return (
        db.query(Unit)
        .filter(Unit.user_id == owner_id)
        .order_by(desc(Unit.created_at), desc(Unit.id))
        .all()
    )


def update_unit(db: Session, unit_id: int, owner_id: int, data: UnitIn) -> Unit:
    """Replace the unit's fields and image list; files dropped from the list are removed."""
    unit = get_owned_unit(db, unit_id, owner_id)
    previous_images = unit.images

    image_paths = file_storage.store_images(data.images, owned=previous_images)
    _apply_fields(unit, data)
    unit.images = image_paths
    try:
        db.commit()
    except Exception:
        db.rollback()
        file_storage.delete_images(p for p in image_paths if p not in previous_images)
        raise
    db.refresh(unit)

    dropped = [p for p in previous_images if p not in image_paths]
    if dropped:
        release_images(db, dropped)
    return unit


def delete_unit(db: Session, unit_id: int, acting_user_id: Optional[int] = None, as_admin: bool = False) -> None:
    """
    Delete a unit with its bookings and inquiries, then remove its image files.
    Admin deletes skip the ownership check.
    """
    if as_admin:
        unit = get_unit(db, unit_id)
    else:
        unit = get_owned_unit(db, unit_id, acting_user_id)

    image_paths = unit.images
    db.delete(unit)
    db.commit()

    removed = release_images(db, image_paths)
    logger.info(
        f"[UNIT] Deleted unit id={unit_id} (admin={as_admin}); "
        f"removed {removed}/{len(image_paths)} image files"
    )


def list_public_units(
    db: Session,
    search: Optional[str] = None,
    location: Optional[str] = None,
    available: Optional[bool] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
) -> List[Unit]:
    query = db.query(Unit)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Unit.building_name.ilike(pattern),
                Unit.location.ilike(pattern),
                Unit.specifications.ilike(pattern),
                Unit.special_features.ilike(pattern),
            )
        )
    if location:
        query = query.filter(Unit.location.ilike(f"%{location}%"))
    if available is not None:
        query = query.filter(Unit.is_available.is_(available))
    if min_price is not None:
        query = query.filter(Unit.unit_price >= min_price)
    if max_price is not None:
        query = query.filter(Unit.unit_price <= max_price)

    return query.order_by(desc(Unit.created_at), desc(Unit.id)).all()


def list_all_units_with_owner(db: Session) -> List[dict]:
    units = (
        db.query(Unit)
        .options(joinedload(Unit.owner))
        .order_by(desc(Unit.created_at), desc(Unit.id))
        .all()
    )
    result = []
    for unit in units:
        data = unit.to_dict()
        data["owner_username"] = unit.owner.username if unit.owner else None
        data["owner_email"] = unit.owner.email if unit.owner else None
        result.append(data)
    return result
