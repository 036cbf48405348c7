"""
app/api/routers package marker.
"""

from app.api.routers.admin_router import router as admin_router
from app.api.routers.attendance_router import router as attendance_router
from app.api.routers.marks_router import router as marks_router

__all__ = [
    "admin_router",
    "attendance_router",
    "marks_router",
]
