"""
Application service for the customer booking flow.

The service fetches the availability window and booked times through an
injected store and delegates the slot derivation to the domain-level
``SlotCalculator``. The store is passed in explicitly, never looked up
from module state, so tests can substitute a stub via the protocol.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Protocol, Set

from ..domain.exceptions import InvalidInputError
from ..domain.models import (
    Appointment,
    AppointmentStatus,
    Barber,
    BarberAvailability,
    BookingRequest,
    normalize_time_label,
)
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the store behaviour needed by the booking flow."""

    def list_active_barbers(self) -> List[Barber]:
        """Return barbers that can be booked."""

    def get_availability(self, barber_id: str, day: date) -> BarberAvailability | None:
        """Return the open availability record, or None."""

    def get_booked_times(
        self,
        barber_id: str,
        day: date,
        status: AppointmentStatus = AppointmentStatus.CONFIRMED,
    ) -> Set[str]:
        """Return time labels already reserved."""

    def create_appointment(self, request: BookingRequest) -> Appointment:
        """Persist a booking or raise a StoreError subclass."""


class BookingService:
    """
    Orchestrates availability lookups, slot calculation and booking.

    Bookings are only accepted for slots currently offered, but two
    customers can still read the same free slot before either insert
    commits. The store closes that race with a unique index on confirmed
    (barber_id, date, time), reported back as ``BookingConflictError``.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        slot_calculator: SlotCalculator,
    ) -> None:
        self._store = store
        self._slot_calculator = slot_calculator

    def list_barbers(self) -> List[Barber]:
        """Active barbers, as offered in step one of the booking flow."""
        return self._store.list_active_barbers()

    def resolve_barber(self, identifier: str) -> Barber:
        """
        Resolve a barber by id, name (case-insensitive) or 1-based list number.

        Raises:
            InvalidInputError: If no active barber matches
        """
        barbers = self.list_barbers()
        identifier = identifier.strip()

        for barber in barbers:
            if barber.id == identifier or barber.name.lower() == identifier.lower():
                return barber

        if identifier.isdigit() and 1 <= int(identifier) <= len(barbers):
            return barbers[int(identifier) - 1]

        raise InvalidInputError(f"Unknown barber: '{identifier}'")

    def available_slots(self, barber_id: str, day: date) -> List[str]:
        """
        Fetch the window and booked set, then compute the free slots.
        """
        availability = self._store.get_availability(barber_id, day)

        if availability is None:
            logger.debug("No availability for barber %s on %s", barber_id, day)
            return []

        booked = self._store.get_booked_times(barber_id, day, AppointmentStatus.CONFIRMED)

        slots = self._slot_calculator.compute_availability(availability.window(), booked)
        logger.debug(
            "Barber %s on %s: %d free slot(s), %d booked",
            barber_id, day, len(slots), len(booked)
        )
        return slots

    def check_slot(self, barber_id: str, day: date, slot: str) -> str:
        """
        Normalize a requested time and make sure it is currently offered.

        Returns:
            The slot as an ``HH:MM`` label

        Raises:
            InvalidInputError: If the time is malformed or not a free slot
        """
        label = normalize_time_label(slot)
        free = self.available_slots(barber_id, day)

        if not free:
            raise InvalidInputError(f"No available time slots on {day.isoformat()}")
        if label not in free:
            raise InvalidInputError(
                f"{label} is not an available time slot on {day.isoformat()}. "
                f"Free slots: {', '.join(free)}"
            )
        return label

    def book(self, request: BookingRequest) -> Appointment:
        """
        Submit a validated booking for a currently offered slot.

        Raises:
            InvalidInputError: If the requested time is not a free slot
            BookingConflictError: If the store reports the slot as taken
            StoreError: If the write fails for any other reason
        """
        self.check_slot(request.barber_id, request.appointment_date, request.appointment_time)
        appointment = self._store.create_appointment(request)
        logger.info(
            "Booked %s at %s on %s with barber %s",
            appointment.customer_name,
            appointment.appointment_time,
            appointment.appointment_date,
            appointment.barber_id,
        )
        return appointment
