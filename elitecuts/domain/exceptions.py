"""
Domain-specific exception hierarchy for the Elite Cuts booking application.
"""


class BarbershopError(Exception):
    """Base class for all application-level errors."""


class InvalidInputError(BarbershopError, ValueError):
    """Raised when a time label, window or booking form is malformed."""


class StoreError(BarbershopError):
    """Raised when the hosted database cannot be read or written."""


class BookingConflictError(StoreError):
    """Raised when the store rejects a booking for an already taken slot."""


class AuthenticationError(BarbershopError):
    """Raised when signing in fails or no session is available."""


class NotAuthorizedError(AuthenticationError):
    """Raised when a signed-in account is not an active admin."""
