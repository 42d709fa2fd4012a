"""
Authentication Service
Account registration, credential checks and the OTP password reset flow
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Type, Union

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mayspace.core.config import settings
from mayspace.core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from mayspace.core.security import get_password_hash, verify_password
from mayspace.models.otp import OtpCode
from mayspace.models.user import Admin, User
from mayspace.services import mailer

logger = logging.getLogger(__name__)

Account = Union[User, Admin]

OTP_MIN = 100000
OTP_MAX = 999999


# ─────────────────────── Registration / login ───────────────────────

def _find_by_login(db: Session, model: Type[Account], login: str) -> Optional[Account]:
    return db.query(model).filter(or_(model.username == login, model.email == login.lower())).first()


def _ensure_unique(db: Session, model: Type[Account], username: str, email: str) -> None:
    existing = db.query(model).filter(or_(model.username == username, model.email == email)).first()
    if existing:
        raise ConflictError("Username or email already exists")


def _save_account(db: Session, account: Account) -> Account:
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username or email already exists")
    db.refresh(account)
    return account


def register_user(
    db: Session,
    name: str,
    username: str,
    email: str,
    contact_number: str,
    password: str,
) -> User:
    _ensure_unique(db, User, username, email)
    user = User(
        name=name,
        username=username,
        email=email,
        contact_number=contact_number,
        password=get_password_hash(password),
    )
    user = _save_account(db, user)
    logger.info(f"[AUTH] Registered user id={user.id} username={user.username}")
    return user


def register_admin(db: Session, username: str, email: str, contact_number: str, password: str) -> Admin:
    _ensure_unique(db, Admin, username, email)
    admin = Admin(
        username=username,
        email=email,
        contact_number=contact_number,
        password=get_password_hash(password),
    )
    admin = _save_account(db, admin)
    logger.info(f"[AUTH] Registered admin id={admin.id} username={admin.username}")
    return admin


def authenticate(db: Session, model: Type[Account], login: str, password: str) -> Account:
    """Look the account up by username or email; one message for every failure."""
    account = _find_by_login(db, model, login)
    if not account or not verify_password(password, account.password):
        raise UnauthorizedError("Invalid username or password")
    return account


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


# ─────────────────────── OTP ───────────────────────

def generate_otp() -> str:
    """Return a uniformly random 6-digit code in [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def request_password_reset(db: Session, email: str, now: Optional[datetime] = None) -> OtpCode:
    """
    Create an OTP for the user owning ``email`` and mail it.

    The row is committed before delivery is attempted; a delivery failure is
    logged and the OTP stays valid.
    """
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("No account found with that email")

    now = now or datetime.utcnow()
    otp = OtpCode(
        user_id=user.id,
        code=generate_otp(),
        created_at=now,
        expires_at=now + timedelta(minutes=settings.OTP_TTL_MINUTES),
        used=False,
    )
    db.add(otp)
    db.commit()
    db.refresh(otp)

    try:
        delivered = mailer.send_otp_email(user.email, otp.code)
    except Exception as e:
        logger.error(f"[AUTH] OTP delivery raised for user id={user.id}: {e}")
        delivered = False
    if not delivered:
        logger.warning(f"[AUTH] OTP id={otp.id} stored but not delivered to user id={user.id}")
    return otp


def validate_and_consume_otp(db: Session, email: str, code: str, now: Optional[datetime] = None) -> bool:
    """Mark the matching unused, unexpired code as used. Single use."""
    user = get_user_by_email(db, email)
    if not user:
        return False

    now = now or datetime.utcnow()
    otp = (
        db.query(OtpCode)
        .filter(
            OtpCode.user_id == user.id,
            OtpCode.code == str(code).strip(),
            OtpCode.used.is_(False),
            OtpCode.expires_at > now,
        )
        .order_by(OtpCode.id.desc())
        .with_for_update()
        .first()
    )
    if not otp:
        return False

    otp.used = True
    db.commit()
    return True


def reset_password(db: Session, email: str, code: str, new_password: str, now: Optional[datetime] = None) -> User:
    if not validate_and_consume_otp(db, email, code, now=now):
        raise ValidationError("Invalid or expired OTP")

    user = get_user_by_email(db, email)
    user.password = get_password_hash(new_password)
    db.commit()
    logger.info(f"[AUTH] Password reset for user id={user.id}")
    return user
