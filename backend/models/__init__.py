"""Pydantic models for data validation and type checking."""

from models.attendance import AttendanceRecord, AttendanceStatus, ValidRecord
from models.notification import (
    Attachment,
    BatchResult,
    Envelope,
    NotificationResult,
    RenderedNotification,
    SendOutcome,
    SendReceipt,
)

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
    "ValidRecord",
    "Attachment",
    "BatchResult",
    "Envelope",
    "NotificationResult",
    "RenderedNotification",
    "SendOutcome",
    "SendReceipt",
]
