"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    AdminUser,
    Appointment,
    AppointmentStatus,
    Barber,
    BarberAvailability,
    BookingRequest,
    ServiceType,
    TimeWindow,
)
from .slot_calculator import SlotCalculator, compute_availability, filter_available, generate_slots

__all__ = [
    "AdminUser",
    "Appointment",
    "AppointmentStatus",
    "Barber",
    "BarberAvailability",
    "BookingRequest",
    "ServiceType",
    "TimeWindow",
    "SlotCalculator",
    "compute_availability",
    "filter_available",
    "generate_slots",
]
