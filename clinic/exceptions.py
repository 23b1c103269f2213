"""
Domain error taxonomy.

Services raise these; the handler registered in main.py renders them as
``{"statusCode", "message", "success": false, "errors": []}`` JSON.
"""

from typing import Optional


class ClinicError(Exception):
    """Base exception for all clinic domain errors."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# Validation


class MissingField(ClinicError):
    status_code = 400
    default_message = "All fields are required"

    def __init__(self, message: Optional[str] = None, fields: Optional[list[str]] = None) -> None:
        self.fields = fields or []
        if message is None and self.fields:
            message = f"Missing required field(s): {', '.join(self.fields)}"
        super().__init__(message)


class RatingOutOfRange(ClinicError):
    status_code = 400
    default_message = "Rating must be between 1 and 5"


class InvalidStatus(ClinicError):
    status_code = 400
    default_message = "Unknown appointment status"


class InvalidFilter(ClinicError):
    status_code = 400
    default_message = "Invalid filter value"


class InvalidCalendar(ClinicError):
    status_code = 400
    default_message = "available_times must map date -> shift -> list of slot labels"


# Authentication / authorization


class Unauthenticated(ClinicError):
    status_code = 401
    default_message = "Unauthorized: User must login to perform this operation"


class InvalidCredentials(ClinicError):
    status_code = 401
    default_message = "Invalid credentials"


class Forbidden(ClinicError):
    status_code = 403
    default_message = "User must be Admin to perform this operation"


# Not found


class DoctorNotFound(ClinicError):
    status_code = 404
    default_message = "Doctor not found"


class PatientNotFound(ClinicError):
    status_code = 404
    default_message = "Patient not found"


class AppointmentNotFound(ClinicError):
    status_code = 404
    default_message = "Appointment not found"


class UserNotFound(ClinicError):
    status_code = 404
    default_message = "User not found"


class NoCompletedAppointment(ClinicError):
    status_code = 404
    default_message = "No valid completed appointment found to review"


# Conflicts


class DateUnavailable(ClinicError):
    status_code = 400
    default_message = "Doctor is not available on the selected date"


class SlotUnavailable(ClinicError):
    status_code = 400
    default_message = "Doctor is not available at the selected time"


class SlotAlreadyBooked(ClinicError):
    status_code = 409
    default_message = "This time slot is already booked"


class DuplicateReview(ClinicError):
    status_code = 409
    default_message = "You have already submitted a review for this appointment"


class InvalidStatusTransition(ClinicError):
    status_code = 409

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change appointment status from '{current}' to '{requested}'")


class UserAlreadyExists(ClinicError):
    status_code = 409
    default_message = "User already exists"


# Persistence


class PersistenceFailure(ClinicError):
    status_code = 500
    default_message = "Could not save changes"
