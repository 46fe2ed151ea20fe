# timesheets/exceptions.py
"""
Error taxonomy of the timesheet engine.

Every error is recoverable by the caller; the engine keeps no state that an
error could leave half-written.
"""
from django.core.exceptions import ValidationError as DjangoValidationError


class TimesheetError(Exception):
    """Base class for engine errors."""


class ValidationError(TimesheetError, DjangoValidationError):
    """
    Missing or invalid input (half-day period, date earned, documents, ...).
    Nothing was persisted. Accepts a message or a {field/date: messages} dict,
    like Django's ValidationError.
    """


class StateConflictError(TimesheetError):
    """A write or transition was attempted from the wrong status."""

    def __init__(self, message: str, *, status: str | None = None):
        super().__init__(message)
        self.status = status


class EligibilityError(TimesheetError):
    """Submission outside the eligibility window or below the completeness threshold."""

    def __init__(self, message: str, *, condition: str):
        super().__init__(message)
        self.condition = condition


class DataIntegrityError(TimesheetError):
    """Stored data contradicts itself and needs administrative resolution."""
