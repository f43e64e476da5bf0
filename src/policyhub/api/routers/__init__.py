"""API routers."""

from .auth import router as auth_router
from .drive import router as drive_router
from .health import router as health_router
from .organizations import router as organizations_router
from .settings import router as settings_router

__all__ = [
    "auth_router",
    "drive_router",
    "health_router",
    "organizations_router",
    "settings_router",
]
