class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRangeError(ValidationError):
    """Raised when a date window, week count or similar range is malformed or inverted."""


class NotFoundError(DomainError):
    """Raised when a referenced subject, faculty member, entry or course does not exist."""


class ConflictError(DomainError):
    """Raised when a write would violate a uniqueness rule of the store."""


class SlotOccupiedError(ConflictError):
    """Raised when a timetable slot already holds an entry."""


class DuplicateAttendanceError(ConflictError):
    """Raised when a student already has a mark for the same subject, date and period."""


class MDCNotConfiguredError(DomainError):
    """Raised when an MDC toggle finds no configuration for the department/semester."""


class StoreUnavailableError(DomainError):
    """Raised when the backing store cannot serve a call.

    The only error class a caller may retry; the core never retries itself.
    """
