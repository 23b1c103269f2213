"""Users domain - accounts and token sessions"""

from .router import router

__all__ = ["router"]
