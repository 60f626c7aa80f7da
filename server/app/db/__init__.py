"""
Database package.

Routers and services import ``from app.db import crud, get_db``; the
session factory and engine live in ``app.db.database``.
"""

from . import crud
from .database import get_db

__all__ = ["crud", "get_db"]
