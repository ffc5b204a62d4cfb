"""API route modules."""

from .auth import router as auth_router
from .categories import router as categories_router
from .events import router as events_router
from .health import router as health_router
from .reports import router as reports_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "categories_router",
    "events_router",
    "health_router",
    "reports_router",
    "users_router",
]
