"""Doctors domain - directory search, staff CRUD and availability edits"""

from .router import router

__all__ = ["router"]
