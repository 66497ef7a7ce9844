"""
Email content for attendance notifications.

Every builder returns a RenderedNotification carrying a fixed subject plus
plain-text and HTML bodies with the same content. Builders only format;
names and ids must already be validated and sanitized.
"""

import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from models import AttendanceStatus, RenderedNotification

logger = logging.getLogger(__name__)

SCHOOL_TIMEZONE = ZoneInfo("Asia/Kolkata")
DEFAULT_SCHOOL_NAME = "Saamarthya Academy"

PRESENT_SUBJECT = "Attendance: Present ✔️"
ABSENT_SUBJECT = "Attendance: Absent ❗"
REPORT_SUBJECT = "Monthly Attendance Report"

# Badge colors: (background, text, border)
_BADGE_STYLES = {
    AttendanceStatus.PRESENT: ("#d1fae5", "#065f46", "#a7f3d0"),
    AttendanceStatus.ABSENT: ("#fee2e2", "#991b1b", "#fecaca"),
}

_WRAPPER_STYLE = (
    "font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial,sans-serif;"
    "color:#111827;line-height:1.6"
)


def resolve_timestamp(value: str | None) -> datetime:
    """
    Parse an ISO-8601 timestamp into the school timezone.

    Naive timestamps are taken as UTC. Missing values resolve to now; values
    that cannot be parsed also resolve to now, with a warning.
    """
    if not value:
        return datetime.now(SCHOOL_TIMEZONE)
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError, TypeError):
        logger.warning(
            "Unparsable timestamp, using current time",
            extra={"event": "timestamp_fallback", "value": value},
        )
        return datetime.now(SCHOOL_TIMEZONE)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(SCHOOL_TIMEZONE)


def format_date_time(value: str | None) -> str:
    """Format as e.g. 'Monday, 25 August 2025 at 03:30 PM' (IST)."""
    moment = resolve_timestamp(value)
    return f"{format_day(moment.date())} at {moment.strftime('%I:%M %p')}"


def format_date(value: str | None) -> str:
    """Format as e.g. 'Monday, 25 August 2025' (IST)."""
    return format_day(resolve_timestamp(value).date())


def format_day(day: date) -> str:
    return f"{day.strftime('%A')}, {day.day} {day.strftime('%B %Y')}"


def _badge(status: AttendanceStatus) -> str:
    background, color, border = _BADGE_STYLES[status]
    return (
        f'<span style="display:inline-block;padding:4px 10px;border-radius:9999px;'
        f"background:{background};color:{color};border:1px solid {border};"
        f'font-weight:700;">{status.value}</span>'
    )


def _signature_html(school_name: str) -> str:
    return f"""
    <hr style="border:none;border-top:1px solid #e5e7eb;margin:16px 0" />
    <p style="margin:0">Best regards,</p>
    <p style="margin:0"><strong>{school_name}</strong></p>"""


def build_present_email(
    student_id: str,
    student_name: str,
    when_iso: str | None,
    school_name: str = DEFAULT_SCHOOL_NAME,
) -> RenderedNotification:
    """
    Build the PRESENT notification.

    Args:
        student_id: Normalized student id
        student_name: Sanitized student name
        when_iso: ISO-8601 time of the check-in (None for now)
        school_name: Name used in the body and signature

    Returns:
        RenderedNotification with PRESENT_SUBJECT
    """
    when_str = format_date_time(when_iso)

    text = f"""Dear Parent,

Your child {student_name} (ID: {student_id}) is marked PRESENT at {school_name}.

Date & Time: {when_str}

Best regards,
{school_name}"""

    html = f"""
  <div style="{_WRAPPER_STYLE}">
    <p>Dear Parent,</p>
    <p>
      Your child <strong>{student_name}</strong> (ID: <strong>{student_id}</strong>) is marked
      {_badge(AttendanceStatus.PRESENT)}
      at {school_name}.
    </p>
    <p style="margin:12px 0 0 0;"><strong>Date &amp; Time:</strong> {when_str}</p>{_signature_html(school_name)}
  </div>"""

    return RenderedNotification(subject=PRESENT_SUBJECT, text=text, html=html)


def build_absent_email(
    student_id: str,
    student_name: str,
    date_iso: str | None,
    school_name: str = DEFAULT_SCHOOL_NAME,
) -> RenderedNotification:
    """Build the ABSENT notification (date only, no time of day)."""
    day_str = format_date(date_iso)

    text = f"""Dear Parent,

This is to inform you that {student_name} (ID: {student_id}) was marked ABSENT at {school_name}.

Date: {day_str}

If this is unexpected, please contact the school administration.

Best regards,
{school_name}"""

    html = f"""
  <div style="{_WRAPPER_STYLE}">
    <p>Dear Parent,</p>
    <p>
      This is to inform you that <strong>{student_name}</strong> (ID: <strong>{student_id}</strong>) was marked
      {_badge(AttendanceStatus.ABSENT)}
      at {school_name}.
    </p>
    <p style="margin:12px 0 0 0;"><strong>Date:</strong> {day_str}</p>
    <p style="margin:12px 0 0 0;">If this is unexpected, please contact the school administration.</p>{_signature_html(school_name)}
  </div>"""

    return RenderedNotification(subject=ABSENT_SUBJECT, text=text, html=html)


def build_notification(
    status: AttendanceStatus,
    student_id: str,
    student_name: str,
    occurred_at: str | None,
    school_name: str = DEFAULT_SCHOOL_NAME,
) -> RenderedNotification:
    """Dispatch to the builder for the given status."""
    if status is AttendanceStatus.ABSENT:
        return build_absent_email(student_id, student_name, occurred_at, school_name)
    return build_present_email(student_id, student_name, occurred_at, school_name)


def build_report_email(school_name: str = DEFAULT_SCHOOL_NAME) -> RenderedNotification:
    """Cover message for the monthly PDF report."""
    text = (
        "Attached is your child's monthly attendance report.\n\n"
        f"Best regards,\n{school_name}"
    )
    html = (
        "<p>Attached is your child's monthly attendance report.</p>"
        f"<p>Best regards,<br><strong>{school_name}</strong></p>"
    )
    return RenderedNotification(subject=REPORT_SUBJECT, text=text, html=html)
