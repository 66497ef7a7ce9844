"""
Shape and format checks for attendance records.

validate_record() either returns a ValidRecord or raises exactly one
RecordRejected subclass. Checks run in a fixed order: presence of all
required fields first, then student id, email and status formats.
"""

import re
from typing import Any

from pydantic import ValidationError

from models import AttendanceRecord, AttendanceStatus, ValidRecord
from models.types import StudentID
from notifications.errors import (
    InvalidEmail,
    InvalidStatus,
    InvalidStudentId,
    MissingField,
)

STUDENT_ID_PATTERN = re.compile(r"^[A-Z0-9]+$")
STUDENT_ID_MIN_LENGTH = 3
# No separators or address-list punctuation, so one value is one mailbox
EMAIL_PATTERN = re.compile(r"^[^\s@,;<>()\"]+@[^\s@,;<>()\"]+\.[^\s@,;<>()\"]+$")

# Characters that could break out of HTML text or mail headers
_UNSAFE_NAME_CHARS = re.compile(r"[<>\"'&]")

REQUIRED_FIELDS = (
    ("student_id", "studentId"),
    ("student_name", "studentName"),
    ("parent_email", "parentEmail"),
)


def coerce_record(record: Any) -> AttendanceRecord:
    """
    Turn a raw payload entry into an AttendanceRecord.

    Raises:
        MissingField: If the entry is not an object or its fields are unusable
    """
    if isinstance(record, AttendanceRecord):
        return record
    if not isinstance(record, dict):
        raise MissingField(message="Invalid or missing fields")
    try:
        return AttendanceRecord.from_payload(record)
    except ValidationError:
        raise MissingField(message="Invalid or missing fields")


def normalize_student_id(raw: str) -> str:
    """Trim and upper-case a student id, then check its format."""
    student_id = raw.strip().upper()
    if len(student_id) < STUDENT_ID_MIN_LENGTH or not STUDENT_ID_PATTERN.match(student_id):
        raise InvalidStudentId()
    return student_id


def normalize_email(raw: str) -> str:
    """Trim and lower-case an email address, then check its shape."""
    email = raw.strip().lower()
    if not is_email(email):
        raise InvalidEmail()
    return email


def is_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value or ""))


def sanitize_name(raw: str) -> str:
    """Strip markup-breaking characters and surrounding whitespace."""
    return _UNSAFE_NAME_CHARS.sub("", raw).strip()


def normalize_status(
    raw: str | None, default: AttendanceStatus = AttendanceStatus.PRESENT
) -> AttendanceStatus:
    if raw is None or not raw.strip():
        return default
    try:
        return AttendanceStatus(raw.strip().upper())
    except ValueError:
        raise InvalidStatus(f"Invalid status: {raw.strip()}")


def validate_record(
    record: Any, default_status: AttendanceStatus = AttendanceStatus.PRESENT
) -> ValidRecord:
    """
    Validate a single attendance record.

    Args:
        record: AttendanceRecord or raw dict from a JSON payload
        default_status: Status to use when the record carries none

    Returns:
        ValidRecord with normalized id, lowercased email and sanitized name

    Raises:
        MissingField: Required field absent or blank
        InvalidStudentId: Id not alphanumeric or shorter than 3 characters
        InvalidEmail: Email not shaped like local@domain.tld
        InvalidStatus: Status is neither PRESENT nor ABSENT
    """
    parsed = coerce_record(record)

    for attr, label in REQUIRED_FIELDS:
        value = getattr(parsed, attr)
        if value is None or not value.strip():
            raise MissingField(label)

    student_id = normalize_student_id(parsed.student_id or "")
    parent_email = normalize_email(parsed.parent_email or "")

    student_name = sanitize_name(parsed.student_name or "")
    if not student_name:
        raise MissingField("studentName")

    status = normalize_status(parsed.status, default_status)

    occurred_at = parsed.occurred_at.strip() if parsed.occurred_at else None

    return ValidRecord(
        student_id=StudentID(student_id),
        student_name=student_name,
        parent_email=parent_email,
        status=status,
        occurred_at=occurred_at or None,
    )


def echo_student_id(record: Any) -> str | None:
    """Best-effort student id for a result row, even for rejected records."""
    if isinstance(record, AttendanceRecord):
        return record.student_id
    if isinstance(record, dict):
        value = record.get("studentId", record.get("student_id"))
        if value is not None:
            return str(value)
    return None
