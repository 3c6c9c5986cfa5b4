"""Error kinds raised by the booking core.

Every kind carries a user-facing message that tells the caller whether to
retry, change the input, or give up, and the HTTP status the API maps it to.
"""


class SchedulingError(Exception):
    kind = "scheduling_error"
    status_code = 400
    default_message = "The request could not be completed."

    def __init__(self, detail: str | None = None, *, user_message: str | None = None) -> None:
        super().__init__(detail or self.default_message)
        self.detail = detail or self.default_message
        self.user_message = user_message or self.default_message


class ValidationError(SchedulingError):
    kind = "validation_error"
    status_code = 422
    default_message = "Some booking details are missing or invalid. Please check them and try again."


class NotFoundError(SchedulingError):
    kind = "not_found"
    status_code = 404
    default_message = "This record no longer exists."


class AuthorizationError(SchedulingError):
    kind = "not_authorized"
    status_code = 403
    default_message = "You are not allowed to change this record."


class BusyDoctorError(SchedulingError):
    kind = "doctor_busy"
    status_code = 409
    default_message = "This doctor is currently busy. Please select another doctor."


class TransitionConflictError(SchedulingError):
    kind = "transition_conflict"
    status_code = 409
    default_message = "This appointment has already been handled."


class StoreError(SchedulingError):
    kind = "store_unavailable"
    status_code = 503
    default_message = "We could not reach the server. Please try again."
