"""
Unit Endpoints
Owner CRUD under /units and the unauthenticated /public/units feed
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mayspace.database import get_db
from mayspace.dependencies import get_current_user
from mayspace.models.user import User
from mayspace.schemas.unit import UnitIn
from mayspace.services import unit_service

router = APIRouter()
public_router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_unit(
    unit_in: UnitIn,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Post a new unit"""
    unit = unit_service.create_unit(db, current_user.id, unit_in)
    return {"message": "Unit posted successfully!", "unit": unit.to_dict()}


@router.get("")
def list_units(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Units posted by the current user"""
    units = unit_service.list_user_units(db, current_user.id)
    return {"units": [u.to_dict() for u in units]}


@router.get("/{unit_id}")
def get_unit(
    unit_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    unit = unit_service.get_owned_unit(db, unit_id, current_user.id)
    return {"unit": unit.to_dict()}


@router.put("/{unit_id}")
def update_unit(
    unit_id: int,
    unit_in: UnitIn,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    unit = unit_service.update_unit(db, unit_id, current_user.id, unit_in)
    return {"message": "Unit updated successfully", "unit": unit.to_dict()}


@router.delete("/{unit_id}")
def delete_unit(
    unit_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    unit_service.delete_unit(db, unit_id, acting_user_id=current_user.id)
    return {"message": "Unit deleted successfully"}


@public_router.get("/units")
def list_public_units(
    db: Session = Depends(get_db),
    search: Optional[str] = None,
    location: Optional[str] = None,
    available: Optional[bool] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
):
    """All listings, newest first"""
    units = unit_service.list_public_units(
        db,
        search=search,
        location=location,
        available=available,
        min_price=min_price,
        max_price=max_price,
    )
    unit_list = []
    for unit in units:
        data = unit.to_dict()
        data["unitPrice"] = unit.unit_price
        unit_list.append(data)
    return {"units": unit_list}
