"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .admin import AdminService, AdminStoreProtocol, DashboardSummary
from .booking import BookingService, BookingStoreProtocol

__all__ = [
    "AdminService",
    "AdminStoreProtocol",
    "BookingService",
    "BookingStoreProtocol",
    "DashboardSummary",
]
