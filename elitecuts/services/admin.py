"""
Application service for the admin dashboard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional, Protocol, Tuple

from ..adapters.supabase_auth import Session
from ..domain.exceptions import AuthenticationError, NotAuthorizedError
from ..domain.models import (
    AdminUser,
    Appointment,
    AppointmentStatus,
    Barber,
    BarberAvailability,
    TimeWindow,
    parse_time_label,
)
from .booking import BookingStoreProtocol

logger = logging.getLogger(__name__)


class AdminStoreProtocol(BookingStoreProtocol, Protocol):
    """Store operations used by the dashboard on top of the booking flow."""

    def set_access_token(self, access_token: str | None) -> None:
        """Send subsequent requests as the signed-in user."""

    def list_barbers(self) -> List[Barber]:
        """All barbers, active or not."""

    def list_appointments(self) -> List[Appointment]:
        """All appointments ordered by date and time."""

    def list_availability(self, day: date) -> List[BarberAvailability]:
        """Availability rows for one date."""

    def upsert_availability(self, availability: BarberAvailability) -> BarberAvailability:
        """Create or replace the row for (barber_id, date)."""

    def update_appointment_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        """Change an appointment's status."""

    def get_admin_user(self, email: str) -> AdminUser | None:
        """Active admin_users row, or None."""


class AuthenticatorProtocol(Protocol):
    def sign_in(self, email: str, password: str) -> Session:
        ...

    def get_session(self) -> Session | None:
        ...

    def sign_out(self) -> None:
        ...


@dataclass
class DashboardSummary:
    """Appointment counters plus the rows of the appointments table."""
    total: int
    today: int
    upcoming: int
    appointments: List[Appointment] = field(default_factory=list)
    barbers: List[Barber] = field(default_factory=list)


class AdminService:
    """
    Admin operations, each guarded by an active admin session.

    Every call re-checks the admin_users table; an account that loses admin
    rights is signed out on its next request.
    """

    def __init__(
        self,
        store: AdminStoreProtocol,
        authenticator: AuthenticatorProtocol,
        default_start: time = time(9, 0),
        default_end: time = time(18, 0),
    ) -> None:
        self._store = store
        self._auth = authenticator
        self._default_start = default_start
        self._default_end = default_end

    def login(self, email: str, password: str) -> Session:
        """
        Sign in and verify the account is an active admin.

        Raises:
            AuthenticationError: If the credentials are rejected
            NotAuthorizedError: If the account is not an active admin
        """
        session = self._auth.sign_in(email, password)
        self._verify_admin(session)
        logger.info("Admin %s signed in", session.email)
        return session

    def logout(self) -> None:
        self._auth.sign_out()
        self._store.set_access_token(None)

    def require_admin(self) -> Session:
        """
        Return the active admin session.

        Raises:
            AuthenticationError: If nobody is signed in
            NotAuthorizedError: If the account is not an active admin
        """
        session = self._auth.get_session()
        if session is None:
            raise AuthenticationError("Not signed in. Run 'elitecuts admin login' first.")
        self._verify_admin(session)
        return session

    def _verify_admin(self, session: Session) -> None:
        self._store.set_access_token(session.access_token)
        if self._store.get_admin_user(session.email) is None:
            logger.warning("Rejected non-admin account %s", session.email)
            self.logout()
            raise NotAuthorizedError(f"{session.email} is not an active admin.")

    def appointments(self) -> List[Appointment]:
        self.require_admin()
        return self._store.list_appointments()

    def barbers(self) -> List[Barber]:
        self.require_admin()
        return self._store.list_barbers()

    def dashboard(self, today: date) -> DashboardSummary:
        """
        Everything the appointments screen shows, behind a single admin check.

        Counts all, today's and upcoming (after today) appointments from one
        fetch of the appointments table.
        """
        self.require_admin()
        appointments = self._store.list_appointments()
        return DashboardSummary(
            total=len(appointments),
            today=sum(1 for a in appointments if a.appointment_date == today),
            upcoming=sum(1 for a in appointments if a.appointment_date > today),
            appointments=appointments,
            barbers=self._store.list_barbers(),
        )

    def availability_for(self, day: date) -> List[Tuple[Barber, BarberAvailability]]:
        """
        One row per barber for the availability editor.

        Barbers without a record are shown as unavailable with the default
        hours; nothing is written until ``set_availability`` is called.
        """
        self.require_admin()
        records = {record.barber_id: record for record in self._store.list_availability(day)}

        rows: List[Tuple[Barber, BarberAvailability]] = []
        for barber in self._store.list_barbers():
            record = records.get(barber.id) or BarberAvailability(
                barber_id=barber.id,
                date=day,
                start_time=self._default_start,
                end_time=self._default_end,
                is_available=False,
            )
            rows.append((barber, record))
        return rows

    def set_availability(
        self,
        barber_id: str,
        day: date,
        is_available: bool,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> BarberAvailability:
        """
        Open or close a barber's day.

        Omitted times keep the existing record's values, falling back to the
        default hours.

        Raises:
            InvalidInputError: If the resulting start is not before the end
        """
        self.require_admin()

        existing = next(
            (record for record in self._store.list_availability(day) if record.barber_id == barber_id),
            None,
        )
        start = parse_time_label(start_time) if start_time else (
            existing.start_time if existing else self._default_start
        )
        end = parse_time_label(end_time) if end_time else (
            existing.end_time if existing else self._default_end
        )

        window = TimeWindow(start=start, end=end)

        record = self._store.upsert_availability(
            BarberAvailability(
                barber_id=barber_id,
                date=day,
                start_time=start,
                end_time=end,
                is_available=is_available,
            )
        )
        logger.info(
            "Barber %s on %s set to %s (%s)",
            barber_id, day, "available" if is_available else "unavailable",
            window
        )
        return record

    def set_appointment_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        self.require_admin()
        appointment = self._store.update_appointment_status(appointment_id, status)
        logger.info("Appointment %s set to %s", appointment_id, status.value)
        return appointment
