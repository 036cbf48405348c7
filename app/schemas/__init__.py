"""
app/schemas package marker.
"""

from app.schemas.bulk_import import AlertRunResponse, BatchSummaryResponse

__all__ = [
    "AlertRunResponse",
    "BatchSummaryResponse",
]
