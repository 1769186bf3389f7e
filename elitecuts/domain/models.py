"""
Domain models for barbers, availability windows and appointments.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, EmailStr, ValidationError, field_validator

from .exceptions import InvalidInputError

_LABEL_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_time_label(value: str | time) -> time:
    """
    Parse a time-of-day label into a ``time``.

    Accepts ``HH:MM`` and ``HH:MM:SS`` (the store returns ``time`` columns
    with seconds).

    Raises:
        InvalidInputError: If the value is not a valid time of day
    """
    if isinstance(value, time):
        return value.replace(microsecond=0)

    if not isinstance(value, str):
        raise InvalidInputError(f"Invalid time of day: {value!r}")

    for fmt in _LABEL_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue

    raise InvalidInputError(f"Invalid time of day: {value!r}")


def format_time_label(value: time) -> str:
    """Format a time as a 24-hour ``HH:MM`` slot label."""
    return f"{value.hour:02d}:{value.minute:02d}"


def normalize_time_label(value: str | time) -> str:
    """Normalize ``09:30:00``, ``9:30`` etc. to ``09:30``."""
    return format_time_label(parse_time_label(value))


def parse_date(value: str | date) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise InvalidInputError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from exc


@dataclass(frozen=True)
class TimeWindow:
    """
    A barber's working window for one date.

    Invariant: start must be before end (no overnight wraparound).
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInputError(
                f"Start time {format_time_label(self.start)} must be before "
                f"end time {format_time_label(self.end)}"
            )

    @classmethod
    def from_labels(cls, start: str | time, end: str | time) -> "TimeWindow":
        """Build a window from two time-of-day labels."""
        return cls(start=parse_time_label(start), end=parse_time_label(end))

    def contains(self, label: str | time) -> bool:
        """Check whether a time falls inside the half-open window."""
        return self.start <= parse_time_label(label) < self.end

    def __str__(self) -> str:
        return f"{format_time_label(self.start)} - {format_time_label(self.end)}"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle status as stored in the appointments table."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ServiceType(str, Enum):
    """Services offered by the shop."""

    HAIRCUT = "haircut"
    BEARD_TRIM = "beard_trim"
    FULL_PACKAGE = "full_package"

    @property
    def label(self) -> str:
        return SERVICE_LABELS[self]


SERVICE_LABELS = {
    ServiceType.HAIRCUT: "Classic Haircut",
    ServiceType.BEARD_TRIM: "Beard Trim",
    ServiceType.FULL_PACKAGE: "Full Package",
}


def parse_status(value: str) -> AppointmentStatus | str:
    """Known statuses become the enum; anything else is kept as stored."""
    try:
        return AppointmentStatus(value)
    except ValueError:
        return value


def service_label(service_type: str | None) -> str:
    """Display label for a stored service type; unknown values are shown as-is."""
    if not service_type:
        return "-"
    try:
        return ServiceType(service_type).label
    except ValueError:
        return service_type


@dataclass
class Barber:
    """A barber who can be booked."""
    id: str
    name: str
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Barber":
        return cls(
            id=str(record["id"]),
            name=record["name"],
            is_active=bool(record.get("is_active", True)),
        )


@dataclass
class BarberAvailability:
    """
    One barber_availability row: the window a barber opened for a date.
    """
    barber_id: str
    date: date
    start_time: time
    end_time: time
    is_available: bool
    id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BarberAvailability":
        return cls(
            id=str(record["id"]) if record.get("id") is not None else None,
            barber_id=str(record["barber_id"]),
            date=parse_date(record["date"]),
            start_time=parse_time_label(record["start_time"]),
            end_time=parse_time_label(record["end_time"]),
            is_available=bool(record.get("is_available", False)),
        )

    def window(self) -> TimeWindow | None:
        """
        Get the bookable window, or None if the barber is off that day.

        A record whose start is not before its end opens no slots.
        """
        if not self.is_available or self.start_time >= self.end_time:
            return None
        return TimeWindow(start=self.start_time, end=self.end_time)

    def to_record(self) -> Dict[str, Any]:
        return {
            "barber_id": self.barber_id,
            "date": self.date.isoformat(),
            "start_time": format_time_label(self.start_time),
            "end_time": format_time_label(self.end_time),
            "is_available": self.is_available,
        }


@dataclass
class Appointment:
    """A stored appointment."""
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    barber_id: str
    appointment_date: date
    appointment_time: str
    status: AppointmentStatus | str
    service_type: Optional[str] = None
    created_at: Optional[DateTime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Appointment":
        created_at = record.get("created_at")
        return cls(
            id=str(record["id"]),
            customer_name=record["customer_name"],
            customer_email=record["customer_email"],
            customer_phone=record["customer_phone"],
            barber_id=str(record["barber_id"]),
            appointment_date=parse_date(record["appointment_date"]),
            appointment_time=normalize_time_label(record["appointment_time"]),
            status=parse_status(record["status"]),
            service_type=record.get("service_type"),
            created_at=pendulum.parse(created_at) if created_at else None,
        )

    def format_display(self) -> str:
        """Format: YYYY-MM-DD HH:MM | Name (status)"""
        return (
            f"{self.appointment_date.isoformat()} {self.appointment_time} | "
            f"{self.customer_name} ({self.status_text})"
        )

    @property
    def status_text(self) -> str:
        if isinstance(self.status, AppointmentStatus):
            return self.status.value
        return self.status


@dataclass
class AdminUser:
    """Row of the admin_users table."""
    email: str
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "AdminUser":
        return cls(email=record["email"], is_active=bool(record.get("is_active", False)))


class BookingRequest(BaseModel):
    """
    The customer booking form.

    Mirrors the form rules of the booking page: name at least 2 characters,
    a valid e-mail, a phone number of at least 10 characters, and a chosen
    barber, date and time.
    """
    customer_name: str
    customer_email: EmailStr
    customer_phone: str
    barber_id: str
    appointment_date: date
    appointment_time: str
    service_type: Optional[ServiceType] = None

    @field_validator("customer_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("customer_phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 10:
            raise ValueError("Please enter a valid phone number")
        return value

    @field_validator("barber_id")
    @classmethod
    def validate_barber(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please select a barber")
        return value.strip()

    @field_validator("appointment_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please select a time")
        return normalize_time_label(value)

    @classmethod
    def from_form(cls, **fields: Any) -> "BookingRequest":
        """
        Validate raw form input.

        Raises:
            InvalidInputError: Listing every failing field
        """
        try:
            return cls(**fields)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            )
            raise InvalidInputError(f"Invalid booking: {problems}") from exc

    def to_record(self) -> Dict[str, Any]:
        """Row for the appointments table; new bookings are confirmed immediately."""
        return {
            "customer_name": self.customer_name,
            "customer_email": str(self.customer_email),
            "customer_phone": self.customer_phone,
            "barber_id": self.barber_id,
            "service_type": self.service_type.value if self.service_type else None,
            "appointment_date": self.appointment_date.isoformat(),
            "appointment_time": self.appointment_time,
            "status": AppointmentStatus.CONFIRMED.value,
        }
