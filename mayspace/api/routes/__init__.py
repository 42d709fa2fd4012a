from mayspace.api.routes.auth import router as auth_router, password_router
from mayspace.api.routes.units import router as units_router, public_router
from mayspace.api.routes.bookings import router as bookings_router
from mayspace.api.routes.inquiries import router as inquiries_router
from mayspace.api.routes.admin import router as admin_router

__all__ = [
    "auth_router",
    "password_router",
    "units_router",
    "public_router",
    "bookings_router",
    "inquiries_router",
    "admin_router",
]
