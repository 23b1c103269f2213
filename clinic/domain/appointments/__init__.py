"""Appointments domain - slot booking and the status lifecycle"""

from .router import router

__all__ = ["router"]
