"""
Inquiry Service
Root inquiries go to the unit owner; replies hang off the root of their thread.
"""
import logging
from typing import List, Optional

from sqlalchemy import desc, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from mayspace.core.errors import ForbiddenError, NotFoundError, ValidationError
from mayspace.models.inquiry import Inquiry
from mayspace.models.unit import Unit
from mayspace.models.user import User

logger = logging.getLogger(__name__)


def create_inquiry(db: Session, sender_id: int, unit_id: int, message: str) -> Inquiry:
    unit = db.query(Unit).filter(Unit.id == unit_id).first()
    if not unit:
        raise NotFoundError("Unit not found")

    recipient_id = unit.user_id
    if sender_id == recipient_id:
        raise ValidationError("Cannot send inquiry to yourself")

    inquiry = Inquiry(
        unit_id=unit.id,
        sender_user_id=sender_id,
        recipient_user_id=recipient_id,
        message=message,
        parent_inquiry_id=None,
    )
    db.add(inquiry)
    db.commit()
    db.refresh(inquiry)
    logger.info(f"[INQUIRY] user id={sender_id} -> user id={recipient_id} about unit id={unit.id}")
    return inquiry


def reply_to_inquiry(
    db: Session,
    parent_id: int,
    sender_id: int,
    message: str,
    recipient_id: Optional[int] = None,
) -> Inquiry:
    """
    Add a reply to the thread containing ``parent_id``.

    Replies always hang off the root inquiry, so answering a reply lands in
    the same thread. Only the two participants of the root may reply. The
    reply inherits the root's unit even when the stated recipient is someone
    else.
    """
    root = db.query(Inquiry).filter(Inquiry.id == parent_id).first()
    if not root:
        raise NotFoundError("Original inquiry not found")
    while root.parent_inquiry_id is not None:
        root = root.parent

    participants = (root.sender_user_id, root.recipient_user_id)
    if sender_id not in participants:
        raise ForbiddenError("Not a participant in this inquiry")

    if recipient_id is None:
        recipient_id = root.recipient_user_id if root.sender_user_id == sender_id else root.sender_user_id
    elif not db.query(User.id).filter(User.id == recipient_id).first():
        raise NotFoundError("Recipient not found")

    reply = Inquiry(
        unit_id=root.unit_id,
        sender_user_id=sender_id,
        recipient_user_id=recipient_id,
        message=message,
        parent_inquiry_id=root.id,
    )
    db.add(reply)
    db.commit()
    db.refresh(reply)
    return reply


def _reply_dict(reply: Inquiry) -> dict:
    return {
        "id": reply.id,
        "unit_id": reply.unit_id,
        "sender_user_id": reply.sender_user_id,
        "recipient_user_id": reply.recipient_user_id,
        "message": reply.message,
        "parent_inquiry_id": reply.parent_inquiry_id,
        "created_at": reply.created_at.isoformat() if reply.created_at else None,
        "sender_name": reply.sender.name if reply.sender else None,
    }


def list_inquiries_for_user(db: Session, user_id: int) -> List[dict]:
    """Root threads the user takes part in, newest first, replies oldest first."""
    roots = (
        db.query(Inquiry)
        .options(
            joinedload(Inquiry.unit),
            joinedload(Inquiry.sender),
            joinedload(Inquiry.recipient),
            selectinload(Inquiry.replies).joinedload(Inquiry.sender),
        )
        .filter(
            Inquiry.parent_inquiry_id.is_(None),
            or_(Inquiry.sender_user_id == user_id, Inquiry.recipient_user_id == user_id),
        )
        .order_by(desc(Inquiry.created_at), desc(Inquiry.id))
        .all()
    )

    threads = []
    for root in roots:
        data = _reply_dict(root)
        data.update({
            "building_name": root.unit.building_name,
            "unit_number": root.unit.unit_number,
            "location": root.unit.location,
            "recipient_name": root.recipient.name if root.recipient else None,
            "replies": [_reply_dict(r) for r in root.replies],
        })
        threads.append(data)
    return threads
