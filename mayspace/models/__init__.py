# Import all models so relationship strings resolve and metadata is complete
from mayspace.models.user import User, Admin
from mayspace.models.unit import Unit
from mayspace.models.booking import Booking, BookingStatus, TransactionType
from mayspace.models.inquiry import Inquiry
from mayspace.models.otp import OtpCode

__all__ = [
    "User",
    "Admin",
    "Unit",
    "Booking",
    "BookingStatus",
    "TransactionType",
    "Inquiry",
    "OtpCode",
]
