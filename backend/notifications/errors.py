"""
Error taxonomy for the attendance notification system.

Call-level errors (InvalidPayload, EmptyBatch, RateLimited) fail the whole
inbound call. Record-level errors (RecordRejected subclasses, TransportError)
are caught by the batch dispatcher and reported per record.
"""


class NotifierError(Exception):
    """Base class for all notifier errors."""

    code = "notifier_error"
    default_message = "Notification error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidPayload(NotifierError):
    """Inbound call is malformed at the top level."""

    code = "invalid_payload"
    default_message = "Invalid payload"


class EmptyBatch(InvalidPayload):
    """Batch call received no records."""

    code = "empty_batch"
    default_message = "records[] required"


class RecordRejected(NotifierError):
    """A single attendance record failed validation."""

    code = "record_rejected"


class MissingField(RecordRejected):
    code = "missing_field"
    default_message = "Missing fields"

    def __init__(self, field: str | None = None, message: str | None = None) -> None:
        self.field = field
        if message is None and field:
            message = f"Missing {field}"
        super().__init__(message)


class InvalidStudentId(RecordRejected):
    code = "invalid_student_id"
    default_message = "Invalid studentId"


class InvalidEmail(RecordRejected):
    code = "invalid_email"
    default_message = "Invalid parentEmail"


class InvalidStatus(RecordRejected):
    code = "invalid_status"
    default_message = "Invalid status"


class TransportError(NotifierError):
    """The mail channel could not deliver a message."""

    code = "transport_error"
    default_message = "send failed"


class RateLimited(NotifierError):
    """Caller exceeded the inbound request cap."""

    code = "rate_limited"
    default_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: float = 0.0, message: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)
