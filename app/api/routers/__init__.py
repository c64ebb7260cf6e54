"""
app/api/routers package marker.
"""

from app.api.routers.timesheet import router as timesheet_router

__all__ = [
    "timesheet_router",
]
