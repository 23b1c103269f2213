"""Reviews domain - reviews of completed visits and rating aggregation"""

from .router import router

__all__ = ["router"]
