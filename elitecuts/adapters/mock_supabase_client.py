"""
In-memory stand-in for the Supabase backend, for demos and tests.
"""

import json
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Set

import pendulum

from ..domain.exceptions import BookingConflictError, StoreError
from ..domain.models import (
    AdminUser,
    Appointment,
    AppointmentStatus,
    Barber,
    BarberAvailability,
    BookingRequest,
    normalize_time_label,
)
from .supabase_auth import Session

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_data.json"


class MockSupabaseClient:
    """
    Mock client that simulates the Supabase tables in memory.

    Data is loaded from ``mock_data.json`` (or a given file). Its
    ``weekly_schedule`` section is expanded into explicit availability
    records for the next ``seed_days`` days so the demo always has
    bookable dates. Confirmed appointments are unique per
    (barber_id, appointment_date, appointment_time), as the hosted store
    enforces with ``sql/appointments_unique_slot.sql``.

    Nothing is written back to disk.
    """

    def __init__(
        self,
        data: Dict[str, Any] | None = None,
        data_file: Path | None = None,
        today: date | None = None,
        seed_days: int = 14
    ):
        """
        Initialize the mock client.

        Args:
            data: Table contents; takes precedence over ``data_file``
            data_file: JSON file to load when ``data`` is not given
            today: Anchor date for the weekly schedule (defaults to today)
            seed_days: How many days after ``today`` to open from the schedule
        """
        if data is None:
            data = self._load_data(data_file or DEFAULT_DATA_FILE)

        self.access_token: str | None = None
        self.barbers: List[Dict[str, Any]] = list(data.get("barbers", []))
        self.availability: List[Dict[str, Any]] = list(data.get("availability", []))
        self.appointments: List[Dict[str, Any]] = list(data.get("appointments", []))
        self.admin_users: List[Dict[str, Any]] = list(data.get("admin_users", []))

        schedule = data.get("weekly_schedule", {})
        if schedule:
            self._expand_weekly_schedule(schedule, today or pendulum.today().date(), seed_days)

    @staticmethod
    def _load_data(data_file: Path) -> Dict[str, Any]:
        """Load mock table data from a JSON file."""
        if not data_file.exists():
            return {}
        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def _expand_weekly_schedule(
        self,
        schedule: Dict[str, Dict[str, List[str]]],
        today: date,
        seed_days: int
    ) -> None:
        existing = {(row["barber_id"], row["date"]) for row in self.availability}
        start = pendulum.date(today.year, today.month, today.day)

        for offset in range(seed_days + 1):
            day = start.add(days=offset)
            for barber_id, weekdays in schedule.items():
                hours = weekdays.get(str(day.weekday()))
                if not hours or (barber_id, day.isoformat()) in existing:
                    continue
                self.availability.append({
                    "id": str(uuid.uuid4()),
                    "barber_id": barber_id,
                    "date": day.isoformat(),
                    "start_time": hours[0],
                    "end_time": hours[1],
                    "is_available": True,
                })

    def set_access_token(self, access_token: str | None) -> None:
        self.access_token = access_token

    # ========== Booking flow ==========

    def list_active_barbers(self) -> List[Barber]:
        return [
            Barber.from_record(row)
            for row in sorted(self.barbers, key=lambda r: r["name"])
            if row.get("is_active", True)
        ]

    def get_availability(self, barber_id: str, day: date) -> BarberAvailability | None:
        rows = [
            row for row in self.availability
            if row["barber_id"] == barber_id
            and row["date"] == day.isoformat()
            and row.get("is_available")
        ]
        if len(rows) != 1:
            return None
        return BarberAvailability.from_record(rows[0])

    def get_booked_times(
        self,
        barber_id: str,
        day: date,
        status: AppointmentStatus = AppointmentStatus.CONFIRMED
    ) -> Set[str]:
        return {
            appointment.appointment_time
            for appointment in self._appointments()
            if appointment.barber_id == barber_id
            and appointment.appointment_date == day
            and appointment.status == status
        }

    def create_appointment(self, request: BookingRequest) -> Appointment:
        taken = self.get_booked_times(request.barber_id, request.appointment_date)
        if request.appointment_time in taken:
            raise BookingConflictError(
                f"The store rejected a duplicate appointments record: "
                f"{request.appointment_time} on {request.appointment_date} is already booked"
            )

        record = request.to_record()
        record["id"] = str(uuid.uuid4())
        record["created_at"] = pendulum.now("UTC").to_iso8601_string()
        self.appointments.append(record)
        return Appointment.from_record(record)

    # ========== Admin dashboard ==========

    def list_barbers(self) -> List[Barber]:
        return [Barber.from_record(row) for row in sorted(self.barbers, key=lambda r: r["name"])]

    def list_appointments(self) -> List[Appointment]:
        return sorted(
            self._appointments(),
            key=lambda a: (a.appointment_date, a.appointment_time)
        )

    def list_availability(self, day: date) -> List[BarberAvailability]:
        return [
            BarberAvailability.from_record(row)
            for row in self.availability
            if row["date"] == day.isoformat()
        ]

    def upsert_availability(self, availability: BarberAvailability) -> BarberAvailability:
        record = availability.to_record()
        for row in self.availability:
            if row["barber_id"] == record["barber_id"] and row["date"] == record["date"]:
                row.update(record)
                return BarberAvailability.from_record(row)

        record["id"] = str(uuid.uuid4())
        self.availability.append(record)
        return BarberAvailability.from_record(record)

    def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus
    ) -> Appointment:
        for row in self.appointments:
            if str(row["id"]) == appointment_id:
                if status == AppointmentStatus.CONFIRMED and row["status"] != status.value:
                    # Re-confirming must not collide with another confirmed booking.
                    taken = self.get_booked_times(
                        str(row["barber_id"]), date.fromisoformat(row["appointment_date"])
                    )
                    if normalize_time_label(row["appointment_time"]) in taken:
                        raise BookingConflictError(
                            f"The store rejected a duplicate appointments record: {appointment_id}"
                        )
                row["status"] = status.value
                return Appointment.from_record(row)

        raise StoreError(f"Appointment not found: {appointment_id}")

    def get_admin_user(self, email: str) -> AdminUser | None:
        for row in self.admin_users:
            if row["email"].lower() == email.lower() and row.get("is_active"):
                return AdminUser.from_record(row)
        return None

    def _appointments(self) -> List[Appointment]:
        return [Appointment.from_record(row) for row in self.appointments]


class MockSupabaseAuthenticator:
    """
    Mock authenticator that bypasses the Supabase auth API.

    Any password is accepted; the admin_users check in the service still
    decides whether the account may use the dashboard. Starts signed in as
    ``email`` so that separate CLI invocations in mock mode work.
    """

    def __init__(self, email: str | None = "admin@elitecuts.example"):
        self._session: Session | None = self._make_session(email) if email else None

    @staticmethod
    def _make_session(email: str) -> Session:
        return Session(
            access_token="mock_access_token",
            refresh_token="mock_refresh_token",
            email=email,
            expires_at=pendulum.now("UTC").add(hours=1).int_timestamp,
        )

    def sign_in(self, email: str, password: str) -> Session:
        self._session = self._make_session(email)
        return self._session

    def get_session(self) -> Session | None:
        return self._session

    def sign_out(self) -> None:
        self._session = None
