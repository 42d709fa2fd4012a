from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mayspace.database import get_db
from mayspace.dependencies import get_current_user
from mayspace.models.user import User
from mayspace.schemas.inquiry import InquiryCreate, InquiryReply
from mayspace.services import inquiry_service

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def send_inquiry(
    body: InquiryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Send a new inquiry to the unit's poster"""
    inquiry = inquiry_service.create_inquiry(db, current_user.id, body.unit_id, body.message)
    return {"message": "Inquiry sent successfully", "inquiryId": inquiry.id}


@router.post("/reply", status_code=status.HTTP_201_CREATED)
def reply_to_inquiry(
    body: InquiryReply,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reply = inquiry_service.reply_to_inquiry(
        db,
        parent_id=body.inquiry_id,
        sender_id=current_user.id,
        message=body.message,
        recipient_id=body.recipient_user_id,
    )
    return {"message": "Reply sent successfully", "inquiryId": reply.id}


@router.get("")
def list_inquiries(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Threads the current user sent or received"""
    return {"inquiries": inquiry_service.list_inquiries_for_user(db, current_user.id)}
