"""
May Space API - Main Application
FastAPI application with CORS, error handling, static uploads and logging
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import os
from datetime import datetime

from mayspace.api.routes import (
    auth_router,
    password_router,
    units_router,
    public_router,
    bookings_router,
    inquiries_router,
    admin_router,
)
from mayspace.core.config import settings
from mayspace.core.errors import MaySpaceError
from mayspace.database import test_connection, init_db, close_db_connection
from mayspace.utils.file_storage import ensure_upload_dir


# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.PROJECT_DESCRIPTION,
)


# ==================== MIDDLEWARE ====================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# ==================== STATIC UPLOADS ====================

# Mount needs the directory to exist at import time
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=str(ensure_upload_dir())),
    name="uploads",
)


# ==================== ROUTERS ====================

app.include_router(auth_router, tags=["Authentication"])
app.include_router(password_router, prefix="/api/auth", tags=["Password Reset"])
app.include_router(units_router, prefix="/units", tags=["Units"])
app.include_router(public_router, prefix="/public", tags=["Public"])
app.include_router(bookings_router, prefix="/bookings", tags=["Bookings"])
app.include_router(inquiries_router, prefix="/inquiries", tags=["Inquiries"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])


# ==================== ERROR HANDLERS ====================


@app.exception_handler(MaySpaceError)
async def domain_exception_handler(request: Request, exc: MaySpaceError):
    """Map service-layer errors to their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a 400 with the field errors attached"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "error": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Missing or invalid fields", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    message = f"Database error: {exc}" if settings.DEBUG else "Database error"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": message})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")

    # Don't expose internal errors in production
    error_message = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": error_message},
    )


# ==================== HEALTH & STATUS ENDPOINTS ====================


@app.get("/", tags=["System"])
async def root():
    """Root endpoint - API information"""
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "docs": "/docs",
        "status": "operational",
    }


@app.get("/health", tags=["System"])
def health_check():
    """Health check endpoint"""
    connection_ok = test_connection()
    payload = {
        "status": "healthy" if connection_ok else "degraded",
        "database": "connected" if connection_ok else "disconnected",
        "timestamp": datetime.utcnow().isoformat(),
    }
    code = status.HTTP_200_OK if connection_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=payload)


# ==================== STARTUP & SHUTDOWN ====================


def run_migrations() -> bool:
    """Run Alembic migrations."""
    try:
        from alembic.config import Config
        from alembic import command

        command.upgrade(Config("alembic.ini"), "head")
        logger.info("[STARTUP] Migrations complete")
        return True
    except Exception as e:
        logger.warning(f"[STARTUP] Migration failed: {e}")
        return False


@app.on_event("startup")
async def startup_event():
    """Run on application startup"""
    logger.info(f"[STARTUP] Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    if os.getenv("RUN_MIGRATIONS") == "true":
        if not run_migrations():
            logger.warning("[STARTUP] Falling back to direct table creation")
            init_db()
    else:
        init_db()

    if test_connection():
        logger.info("[STARTUP] Database connection successful")
    else:
        logger.warning("[STARTUP] Database connection failed - continuing in degraded mode")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("[SHUTDOWN] Server shutting down")
    close_db_connection()
