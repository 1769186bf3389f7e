"""
Tests for the command line interface, run against the in-memory store.
"""

import json

import pytest
from typer.testing import CliRunner

from elitecuts import __version__
from elitecuts.cli.app import app

runner = CliRunner()

DAY = "2030-01-07"


@pytest.fixture
def config_file(tmp_path):
    data_file = tmp_path / "mock_data.json"
    data_file.write_text(json.dumps({
        "barbers": [
            {"id": "b1", "name": "Ahmad", "is_active": True},
            {"id": "b2", "name": "Omar", "is_active": False},
        ],
        "availability": [{
            "id": "av1", "barber_id": "b1", "date": DAY,
            "start_time": "09:00:00", "end_time": "11:00:00", "is_available": True,
        }],
        "appointments": [{
            "id": "a1", "customer_name": "Jane Roe", "customer_email": "jane@example.com",
            "customer_phone": "+4587654321", "barber_id": "b1", "appointment_date": DAY,
            "appointment_time": "10:00:00", "status": "confirmed", "service_type": "haircut",
        }],
        "admin_users": [{"email": "admin@elitecuts.example", "is_active": True}],
    }), encoding="utf-8")

    path = tmp_path / "config.yaml"
    path.write_text(
        "supabase_url: https://demo.supabase.co\n"
        "supabase_anon_key: demo-anon-key\n"
        f"mock_data_file: {data_file}\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_file, *args, input=None):
    return runner.invoke(app, ["--config", str(config_file), "--mock", *args], input=input)


class TestBookingCommands:
    """Tests for the customer-facing commands."""

    def test_version(self):
        """Test the version command."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_barbers_lists_active_only(self, config_file):
        """Test inactive barbers are hidden from customers."""
        result = _invoke(config_file, "barbers")

        assert result.exit_code == 0
        assert "MOCK MODE" in result.output
        assert "Ahmad" in result.output
        assert "Omar" not in result.output

    def test_slots(self, config_file):
        """Test the booked 10:00 slot is left out."""
        result = _invoke(config_file, "slots", "ahmad", DAY)

        assert result.exit_code == 0
        assert "3 free slot(s) with Ahmad" in result.output
        assert "09:00  09:30  10:30" in result.output

    def test_slots_closed_day(self, config_file):
        """Test a date without availability reports no slots."""
        result = _invoke(config_file, "slots", "Ahmad", "2030-01-08")

        assert result.exit_code == 0
        assert "No available time slots" in result.output

    def test_book_batch(self, config_file):
        """Test a fully scripted booking."""
        result = _invoke(
            config_file, "book",
            "--barber", "Ahmad", "--date", DAY, "--time", "09:30",
            "--name", "John Doe", "--email", "john@example.com", "--phone", "+45 12 34 56 78",
            "--service", "beard_trim",
        )

        assert result.exit_code == 0
        assert "Booking Confirmed!" in result.output
        assert "09:30" in result.output

    def test_book_interactive(self, config_file):
        """Test prompts fill in barber, time and customer details."""
        result = _invoke(
            config_file, "book", "--date", DAY,
            input="1\n1\nJohn Doe\njohn@example.com\n+4512345678\n",
        )

        assert result.exit_code == 0
        assert "Booking Confirmed!" in result.output
        assert "09:00" in result.output

    def test_book_taken_slot(self, config_file):
        """Test booking an already confirmed slot fails cleanly."""
        result = _invoke(
            config_file, "book",
            "--barber", "Ahmad", "--date", DAY, "--time", "10:00",
            "--name", "John Doe", "--email", "john@example.com", "--phone", "+4512345678",
        )

        assert result.exit_code == 1
        assert "10:00 is not an available" in result.output
        assert "Booking Confirmed!" not in result.output

    def test_book_off_grid_time(self, config_file):
        """Test a time outside the offered slots is rejected before any prompt."""
        result = _invoke(
            config_file, "book",
            "--barber", "Ahmad", "--date", DAY, "--time", "03:17",
        )

        assert result.exit_code == 1
        assert "03:17 is not an available" in result.output
        assert "Customer details" not in result.output

    def test_book_closed_day(self, config_file):
        """Test a date without availability cannot be booked."""
        result = _invoke(
            config_file, "book",
            "--barber", "Ahmad", "--date", "2030-01-08", "--time", "10:00",
            "--name", "John Doe", "--email", "john@example.com", "--phone", "+4512345678",
        )

        assert result.exit_code == 1
        assert "No available time slots" in result.output
        assert "Booking Confirmed!" not in result.output

    def test_book_invalid_email(self, config_file):
        """Test form validation errors are reported."""
        result = _invoke(
            config_file, "book",
            "--barber", "Ahmad", "--date", DAY, "--time", "09:30",
            "--name", "John Doe", "--email", "not-an-email", "--phone", "+4512345678",
        )

        assert result.exit_code == 1
        assert "Invalid booking" in result.output

    def test_missing_config(self, tmp_path):
        """Test a missing config file exits with status 1."""
        result = _invoke(tmp_path / "missing.yaml", "barbers")

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestAdminCommands:
    """Tests for the admin dashboard commands."""

    def test_appointments(self, config_file):
        """Test counters and the appointments table."""
        result = _invoke(config_file, "admin", "appointments")

        assert result.exit_code == 0
        assert "Total: 1" in result.output
        assert "All Appointments" in result.output
        assert "a1" in result.output

    def test_appointments_with_unknown_status(self, config_file, tmp_path):
        """Test a row with a status outside the known set is still listed."""
        data_file = tmp_path / "mock_data.json"
        data = json.loads(data_file.read_text(encoding="utf-8"))
        data["appointments"].append(dict(
            data["appointments"][0], id="a2", appointment_time="09:00:00", status="pending"
        ))
        data_file.write_text(json.dumps(data), encoding="utf-8")

        result = _invoke(config_file, "admin", "appointments")

        assert result.exit_code == 0
        assert "Total: 2" in result.output
        assert "a2" in result.output

    def test_availability(self, config_file):
        """Test every barber, active or not, is listed."""
        result = _invoke(config_file, "admin", "availability", DAY)

        assert result.exit_code == 0
        assert "Ahmad" in result.output
        assert "Omar" in result.output

    def test_set_availability(self, config_file):
        """Test opening a day for an inactive barber."""
        result = _invoke(
            config_file, "admin", "set-availability", "Omar", DAY, "--start", "10:00", "--end", "14:00"
        )

        assert result.exit_code == 0
        assert f"Omar is available on {DAY} (10:00 - 14:00)" in result.output

    def test_set_availability_reversed_hours(self, config_file):
        """Test an end before the start is rejected."""
        result = _invoke(
            config_file, "admin", "set-availability", "Ahmad", DAY, "--start", "17:00", "--end", "09:00"
        )

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_status(self, config_file):
        """Test cancelling an appointment."""
        result = _invoke(config_file, "admin", "status", "a1", "cancelled")

        assert result.exit_code == 0
        assert "Jane Roe (cancelled)" in result.output

    def test_status_unknown_appointment(self, config_file):
        """Test an unknown appointment id fails."""
        result = _invoke(config_file, "admin", "status", "nope", "cancelled")

        assert result.exit_code == 1
        assert "Something went wrong" in result.output
