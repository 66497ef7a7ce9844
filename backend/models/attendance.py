"""Pydantic models for inbound attendance data."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.types import DateString, EmailAddress, StudentID


class AttendanceStatus(str, Enum):
    """Attendance state a parent is notified about."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class AttendanceRecord(BaseModel):
    """
    Raw attendance record as received from a caller.

    Every field is optional here; shape and format checks live in
    notifications.validator so that a bad record can be rejected with a
    single, specific reason instead of a pydantic error list.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    student_id: str | None = Field(None, alias="studentId")
    student_name: str | None = Field(None, alias="studentName")
    parent_email: str | None = Field(None, alias="parentEmail")
    status: str | None = None
    occurred_at: DateString | None = Field(None, alias="occurredAt")

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AttendanceRecord":
        """Build a record from a JSON payload, accepting legacy timestamp keys."""
        data = dict(payload)
        if data.get("occurredAt") is None:
            fallback = data.get("timestamp") or data.get("dateISO")
            if fallback is not None:
                data["occurredAt"] = fallback
        return cls.model_validate(data)

    @field_validator(
        "student_id", "student_name", "parent_email", "status", "occurred_at",
        mode="before",
    )
    @classmethod
    def _scalars_to_str(cls, value: Any) -> Any:
        # Numbers and booleans arrive from loosely typed JSON clients
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("occurred_at", mode="before")
    @classmethod
    def _drop_structured_timestamp(cls, value: Any) -> Any:
        # Unusable timestamps resolve to the current time when rendering
        if value is not None and not isinstance(value, (str, int, float)):
            return None
        return value


class ValidRecord(BaseModel):
    """Attendance record that passed validation and is safe to render."""

    model_config = ConfigDict(frozen=True)

    student_id: StudentID = Field(..., pattern=r"^[A-Z0-9]{3,}$")
    student_name: str = Field(..., min_length=1)
    parent_email: EmailAddress
    status: AttendanceStatus
    occurred_at: DateString | None = None
