"""
Supabase REST (PostgREST) client for barbers, availability and appointments.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Set

import requests

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

logger = logging.getLogger(__name__)

# Postgres error code for unique_violation
UNIQUE_VIOLATION = "23505"


class SupabaseClient:
    """
    Client for the tables behind the booking site.

    Tables: barbers, barber_availability, appointments, admin_users.
    Every call is a single HTTP request; failures surface as ``StoreError``
    and are never retried here.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: int = 10
    ):
        """
        Initialize the REST client.

        Args:
            url: Supabase project URL
            api_key: Project anon key
            access_token: Optional user access token (admin session)
            timeout: Request timeout in seconds
        """
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self.timeout = timeout
        self.set_access_token(access_token)

    def set_access_token(self, access_token: str | None) -> None:
        """Act as a signed-in user, or as the anonymous role when None."""
        self.access_token = access_token
        self.headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
            "Content-Type": "application/json",
        }

    # ========== Booking flow ==========

    def list_active_barbers(self) -> List[Barber]:
        """Barbers shown in the booking flow."""
        rows = self._request(
            "GET", "barbers",
            params={"select": "*", "is_active": "eq.true", "order": "name.asc"}
        )
        return [Barber.from_record(row) for row in rows]

    def get_availability(self, barber_id: str, day: date) -> BarberAvailability | None:
        """
        Get the open availability record for a barber and date.

        Returns:
            The single ``is_available`` record, or None if none exists
        """
        rows = self._request(
            "GET", "barber_availability",
            params={
                "select": "*",
                "barber_id": f"eq.{barber_id}",
                "date": f"eq.{day.isoformat()}",
                "is_available": "eq.true",
            }
        )

        if not rows:
            return None

        if len(rows) > 1:
            logger.warning(
                "Expected one availability record for barber %s on %s, got %d; treating as unavailable",
                barber_id, day, len(rows)
            )
            return None

        return BarberAvailability.from_record(rows[0])

    def get_booked_times(
        self,
        barber_id: str,
        day: date,
        status: AppointmentStatus = AppointmentStatus.CONFIRMED
    ) -> Set[str]:
        """Time labels already taken for a barber and date."""
        rows = self._request(
            "GET", "appointments",
            params={
                "select": "appointment_time",
                "barber_id": f"eq.{barber_id}",
                "appointment_date": f"eq.{day.isoformat()}",
                "status": f"eq.{status.value}",
            }
        )
        return {normalize_time_label(row["appointment_time"]) for row in rows}

    def create_appointment(self, request: BookingRequest) -> Appointment:
        """
        Insert a confirmed appointment.

        Raises:
            BookingConflictError: If the store's uniqueness constraint rejects it
            StoreError: On any other failure
        """
        rows = self._request(
            "POST", "appointments",
            json=request.to_record(),
            prefer="return=representation"
        )

        if not rows:
            raise StoreError("Failed to create appointment: no data returned")

        appointment = Appointment.from_record(rows[0])
        logger.info(
            "Created appointment %s for barber %s on %s at %s",
            appointment.id, appointment.barber_id,
            appointment.appointment_date, appointment.appointment_time
        )
        return appointment

    # ========== Admin dashboard ==========

    def list_barbers(self) -> List[Barber]:
        rows = self._request("GET", "barbers", params={"select": "*", "order": "name.asc"})
        return [Barber.from_record(row) for row in rows]

    def list_appointments(self) -> List[Appointment]:
        """All appointments ordered by date, then time."""
        rows = self._request(
            "GET", "appointments",
            params={"select": "*", "order": "appointment_date.asc,appointment_time.asc"}
        )
        return [Appointment.from_record(row) for row in rows]

    def list_availability(self, day: date) -> List[BarberAvailability]:
        rows = self._request(
            "GET", "barber_availability",
            params={"select": "*", "date": f"eq.{day.isoformat()}"}
        )
        return [BarberAvailability.from_record(row) for row in rows]

    def upsert_availability(self, availability: BarberAvailability) -> BarberAvailability:
        """Create or replace the record for (barber_id, date)."""
        rows = self._request(
            "POST", "barber_availability",
            params={"on_conflict": "barber_id,date"},
            json=availability.to_record(),
            prefer="resolution=merge-duplicates,return=representation"
        )

        if not rows:
            raise StoreError("Failed to update availability: no data returned")

        return BarberAvailability.from_record(rows[0])

    def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus
    ) -> Appointment:
        rows = self._request(
            "PATCH", "appointments",
            params={"id": f"eq.{appointment_id}"},
            json={"status": status.value},
            prefer="return=representation"
        )

        if not rows:
            raise StoreError(f"Appointment not found: {appointment_id}")

        return Appointment.from_record(rows[0])

    def get_admin_user(self, email: str) -> AdminUser | None:
        """Active admin_users row for an e-mail, or None."""
        rows = self._request(
            "GET", "admin_users",
            params={"select": "*", "email": f"eq.{email}", "is_active": "eq.true"}
        )
        return AdminUser.from_record(rows[0]) if rows else None

    # ========== HTTP ==========

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Perform one PostgREST request and return the decoded rows.

        Raises:
            BookingConflictError: On a unique-constraint violation
            StoreError: On network errors or any other non-2xx response
        """
        url = f"{self.rest_url}/{table}"
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer

        logger.debug("%s %s params=%s", method, url, params)

        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as exc:
            raise StoreError(f"Request to {table} failed: {exc}") from exc

        if not response.ok:
            error = self._parse_error(response)
            if response.status_code == 409 or error.get("code") == UNIQUE_VIOLATION:
                raise BookingConflictError(
                    f"The store rejected a duplicate {table} record: "
                    f"{error.get('message', response.text)}"
                )
            raise StoreError(
                f"{method} {table} failed with status {response.status_code}: "
                f"{error.get('message', response.text)}"
            )

        if not response.content:
            return []

        data = response.json()
        return data if isinstance(data, list) else [data]

    @staticmethod
    def _parse_error(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

