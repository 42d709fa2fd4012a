from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mayspace.database import get_db
from mayspace.dependencies import get_current_user
from mayspace.models.user import User
from mayspace.schemas.booking import BookingCreate, BookingStatusUpdate
from mayspace.services import booking_service

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_in: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking = booking_service.create_booking(db, current_user.id, booking_in)
    return {"message": "Booking created successfully", "booking": booking.to_dict()}


@router.get("/my")
def my_bookings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Bookings made by the current user"""
    return {"bookings": booking_service.list_my_bookings(db, current_user.id)}


@router.get("/rented")
def rented_bookings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Bookings on units the current user posted"""
    return {"bookings": booking_service.list_rented_bookings(db, current_user.id)}


@router.put("/{booking_id}/status")
def update_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Confirm or deny a booking (unit owner only)"""
    booking = booking_service.set_booking_status(db, booking_id, body.status, current_user.id)
    return {"message": f"Booking {booking.status.value}", "booking": booking.to_dict()}
