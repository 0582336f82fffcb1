# noteflow/routers/__init__.py
"""
API routers for v1 endpoints.
"""

from noteflow.routers.admin_trash import router as admin_trash_router
from noteflow.routers.trash import router as trash_router

__all__ = [
    "trash_router",
    "admin_trash_router",
]
