"""
Authentication Endpoints
User/admin registration and login, OTP password reset
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mayspace.core.config import settings
from mayspace.core.errors import NotFoundError
from mayspace.database import get_db
from mayspace.models.user import Admin, User
from mayspace.schemas.user import (
    AdminCreate,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    UserCreate,
)
from mayspace.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()
password_router = APIRouter()


@router.post("/user/register", status_code=status.HTTP_201_CREATED)
def register_user(user_in: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    user = auth_service.register_user(
        db,
        name=user_in.name,
        username=user_in.username,
        email=user_in.email,
        contact_number=user_in.contact_number,
        password=user_in.password,
    )
    return {"message": "User registered successfully", "user": user.to_public_dict()}


@router.post("/admin/register", status_code=status.HTTP_201_CREATED)
def register_admin(admin_in: AdminCreate, db: Session = Depends(get_db)):
    """Register a new admin"""
    admin = auth_service.register_admin(
        db,
        username=admin_in.username,
        email=admin_in.email,
        contact_number=admin_in.contact_number,
        password=admin_in.password,
    )
    return {"message": "Admin registered successfully", "admin": admin.to_public_dict()}


@router.post("/user/login")
def login_user(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, User, credentials.username, credentials.password)
    return {
        "message": "Login successful",
        "user": {"id": user.id, "username": user.username, "email": user.email},
    }


@router.post("/admin/login")
def login_admin(credentials: LoginRequest, db: Session = Depends(get_db)):
    admin = auth_service.authenticate(db, Admin, credentials.username, credentials.password)
    return {
        "message": "Login successful",
        "admin": {"id": admin.id, "username": admin.username, "email": admin.email},
    }


@password_router.post("/forgot-password")
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Create an OTP and email it to the account owner"""
    try:
        auth_service.request_password_reset(db, body.email)
    except NotFoundError:
        if not settings.RESET_HIDE_UNKNOWN_EMAIL:
            raise
        logger.info("[AUTH] Password reset requested for unknown email")
    return {"message": "If the email is registered, an OTP has been sent."}


@password_router.post("/reset-password")
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, body.email, body.otp, body.new_password)
    return {"message": "Password reset successful"}
