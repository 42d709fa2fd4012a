"""
Database init - Exports for routes
"""

from .base import Base, CreatedAtMixin
from mayspace.database import engine, SessionLocal, get_db

__all__ = ["Base", "CreatedAtMixin", "engine", "SessionLocal", "get_db"]
