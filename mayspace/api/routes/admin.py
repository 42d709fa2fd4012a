"""
Admin Portal Routes - System Administration
User management, unit management, reports
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from mayspace.database import get_db
from mayspace.dependencies import get_current_admin
from mayspace.models.user import Admin
from mayspace.services import report_service, unit_service, user_service

router = APIRouter(tags=["admin"])


# ==================== USER MANAGEMENT ====================

@router.get("/users")
def get_all_users(
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    users = user_service.list_users(db)
    return {"users": [u.to_public_dict() for u in users]}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Delete a user and everything they own"""
    user_service.delete_user(db, user_id)
    return {"message": "User and all related data deleted successfully"}


# ==================== UNIT MANAGEMENT ====================

@router.get("/units")
def get_all_units(
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return {"units": unit_service.list_all_units_with_owner(db)}


@router.delete("/units/{unit_id}")
def delete_any_unit(
    unit_id: int,
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Delete a unit regardless of owner"""
    unit_service.delete_unit(db, unit_id, as_admin=True)
    return {"message": "Unit deleted successfully"}


# ==================== REPORTS ====================

@router.get("/report/statistics")
def report_statistics(
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": report_service.get_statistics(db)}


@router.get("/report/bookings")
def report_bookings(
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    status: Optional[str] = None,
):
    bookings = report_service.get_bookings_report(db, start_date, end_date, status)
    return {"success": True, "data": bookings}


@router.get("/report/users")
def report_users(
    current_admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": report_service.get_users_report(db)}
