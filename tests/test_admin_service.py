"""
Tests for the AdminService dashboard operations.
"""

from datetime import date, time
from unittest.mock import MagicMock

import pytest

from elitecuts.adapters.mock_supabase_client import MockSupabaseAuthenticator, MockSupabaseClient
from elitecuts.domain.exceptions import (
    AuthenticationError,
    BookingConflictError,
    InvalidInputError,
    NotAuthorizedError,
    StoreError,
)
from elitecuts.domain.models import AppointmentStatus
from elitecuts.services.admin import AdminService

TODAY = date(2024, 11, 25)


def _appointment(appointment_id, day, slot, status="confirmed"):
    return {
        "id": appointment_id,
        "customer_name": "John Doe",
        "customer_email": "john@example.com",
        "customer_phone": "+4512345678",
        "barber_id": "b1",
        "appointment_date": day,
        "appointment_time": slot,
        "status": status,
    }


@pytest.fixture
def store():
    return MockSupabaseClient(data={
        "barbers": [
            {"id": "b1", "name": "Ahmad", "is_active": True},
            {"id": "b2", "name": "Omar", "is_active": False},
        ],
        "availability": [{
            "id": "av1", "barber_id": "b1", "date": "2024-11-25",
            "start_time": "10:00:00", "end_time": "16:00:00", "is_available": True,
        }],
        "appointments": [
            _appointment("a1", "2024-11-24", "10:00"),
            _appointment("a2", "2024-11-25", "11:00"),
            _appointment("a3", "2024-11-26", "09:00"),
            _appointment("a4", "2024-11-26", "09:30", status="cancelled"),
        ],
        "admin_users": [
            {"email": "admin@elitecuts.example", "is_active": True},
            {"email": "former@elitecuts.example", "is_active": False},
        ],
    })


@pytest.fixture
def service(store):
    return AdminService(store=store, authenticator=MockSupabaseAuthenticator())


class TestAccess:
    """Tests for sign-in and admin checks."""

    def test_login_sets_store_token(self, store):
        """Test a valid admin login forwards the session token to the store."""
        service = AdminService(store=store, authenticator=MockSupabaseAuthenticator(email=None))

        session = service.login("admin@elitecuts.example", "secret")

        assert session.email == "admin@elitecuts.example"
        assert store.access_token == session.access_token

    def test_inactive_admin_is_signed_out(self, store):
        """Test an inactive admin is rejected and signed out."""
        authenticator = MockSupabaseAuthenticator(email=None)
        service = AdminService(store=store, authenticator=authenticator)

        with pytest.raises(NotAuthorizedError):
            service.login("former@elitecuts.example", "secret")

        assert authenticator.get_session() is None
        assert store.access_token is None

    def test_requires_session(self, store):
        """Test operations fail when nobody is signed in."""
        service = AdminService(store=store, authenticator=MockSupabaseAuthenticator(email=None))

        with pytest.raises(AuthenticationError, match="Not signed in"):
            service.appointments()

    def test_logout(self, service):
        """Test logout ends the session."""
        service.logout()

        with pytest.raises(AuthenticationError):
            service.require_admin()


class TestDashboard:
    """Tests for appointment listing."""

    def test_summary_counts(self, service):
        """Test total, today and upcoming counters."""
        summary = service.dashboard(TODAY)

        assert (summary.total, summary.today, summary.upcoming) == (4, 1, 2)

    def test_dashboard_checks_admin_once(self, service, store):
        """Test the dashboard fetches appointments once and returns them with the barbers."""
        store.get_admin_user = MagicMock(wraps=store.get_admin_user)
        store.list_appointments = MagicMock(wraps=store.list_appointments)

        summary = service.dashboard(TODAY)

        assert store.get_admin_user.call_count == 1
        assert store.list_appointments.call_count == 1
        assert [a.id for a in summary.appointments] == ["a1", "a2", "a3", "a4"]
        assert [b.name for b in summary.barbers] == ["Ahmad", "Omar"]

    def test_unknown_status_does_not_break_listing(self, service, store):
        """Test a row with an unexpected status is counted and listed."""
        store.appointments.append(_appointment("a5", "2024-11-27", "12:00", status="pending"))

        summary = service.dashboard(TODAY)

        assert summary.total == 5
        assert summary.appointments[-1].status_text == "pending"

    def test_appointments_sorted(self, service):
        """Test appointments are ordered by date then time."""
        ids = [appointment.id for appointment in service.appointments()]

        assert ids == ["a1", "a2", "a3", "a4"]

    def test_set_status(self, service, store):
        """Test cancelling frees the slot."""
        service.set_appointment_status("a2", AppointmentStatus.CANCELLED)

        assert store.get_booked_times("b1", TODAY) == set()

    def test_reconfirm_free_slot(self, service, store):
        """Test a cancelled booking can be confirmed again while its slot is free."""
        service.set_appointment_status("a3", AppointmentStatus.CANCELLED)
        service.set_appointment_status("a3", AppointmentStatus.CONFIRMED)

        assert store.get_booked_times("b1", date(2024, 11, 26)) == {"09:00"}

    def test_unknown_appointment(self, service):
        """Test an unknown id raises StoreError."""
        with pytest.raises(StoreError):
            service.set_appointment_status("missing", AppointmentStatus.CANCELLED)

    def test_reconfirm_onto_taken_slot(self, service, store):
        """Test a cancelled booking cannot be re-confirmed over a newer one."""
        store.appointments.append(_appointment("a5", "2024-11-26", "09:30"))

        with pytest.raises(BookingConflictError):
            service.set_appointment_status("a4", AppointmentStatus.CONFIRMED)


class TestAvailabilityEditor:
    """Tests for barber availability management."""

    def test_rows_default_to_unavailable(self, service):
        """Test every barber gets a row, defaulting to closed 09:00-18:00."""
        rows = {barber.name: record for barber, record in service.availability_for(TODAY)}

        assert rows["Ahmad"].is_available
        assert rows["Ahmad"].start_time == time(10, 0)
        assert not rows["Omar"].is_available
        assert (rows["Omar"].start_time, rows["Omar"].end_time) == (time(9, 0), time(18, 0))

    def test_open_day_with_defaults(self, service, store):
        """Test opening a day without times uses the default hours."""
        record = service.set_availability("b2", TODAY, True)

        assert (record.start_time, record.end_time) == (time(9, 0), time(18, 0))
        assert store.get_availability("b2", TODAY) is not None

    def test_partial_update_keeps_existing_end(self, service):
        """Test only the given time changes."""
        record = service.set_availability("b1", TODAY, True, start_time="12:00")

        assert (record.start_time, record.end_time) == (time(12, 0), time(16, 0))

    def test_close_day(self, service, store):
        """Test closing a day removes it from booking."""
        service.set_availability("b1", TODAY, False)

        assert store.get_availability("b1", TODAY) is None
        assert len(store.list_availability(TODAY)) == 1

    def test_reversed_hours_rejected(self, service):
        """Test start after end fails before anything is written."""
        with pytest.raises(InvalidInputError):
            service.set_availability("b1", TODAY, True, start_time="17:00", end_time="09:00")
