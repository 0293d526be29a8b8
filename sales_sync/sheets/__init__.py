"""
Google Sheets access: API client wrapper, formatting builders, tab sync.
"""

from .client import SheetsClient, a1, build_sheets_service
from .sync import SheetSynchronizer, SyncResult, SyncState, TabDiff

__all__ = [
    "SheetSynchronizer",
    "SheetsClient",
    "SyncResult",
    "SyncState",
    "TabDiff",
    "a1",
    "build_sheets_service",
]
