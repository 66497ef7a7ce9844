"""
Single-record sending.

Same validate, render and send pipeline as the batch dispatcher, but any
failure is raised to the caller instead of being recorded.
"""

import logging
from typing import Any

from models import AttendanceStatus, Envelope, SendOutcome
from notifications.content_builder import DEFAULT_SCHOOL_NAME, build_report_email
from notifications.dispatcher import build_envelope, build_headers
from notifications.errors import MissingField, TransportError
from notifications.mail_channel import MailChannel
from notifications.report_builder import ReportBuilder, split_report_lines
from notifications.validator import normalize_email, sanitize_name, validate_record

logger = logging.getLogger(__name__)


class NotificationSender:
    """
    Sends one attendance notification or one monthly report.

    Args:
        channel: Mail channel used for sends
        report_builder: Renders report attachments (required for send_report)
        school_name: Name used in rendered content and headers
        reply_to: Reply-To address for outbound messages
    """

    def __init__(
        self,
        channel: MailChannel,
        report_builder: ReportBuilder | None = None,
        school_name: str = DEFAULT_SCHOOL_NAME,
        reply_to: str | None = None,
    ) -> None:
        self.channel = channel
        self.report_builder = report_builder
        self.school_name = school_name
        self.reply_to = reply_to

    def _send(self, envelope: Envelope, student_id: str | None) -> SendOutcome:
        try:
            receipt = self.channel.send(envelope)
        except TransportError as e:
            logger.error(
                "Failed to send email: %s",
                e.message,
                extra={"event": "send_failed", "to": envelope.to, "student_id": student_id},
            )
            raise

        if not receipt.dry_run:
            logger.info(
                "Email sent successfully",
                extra={"event": "send_succeeded", "to": envelope.to,
                       "student_id": student_id, "message_id": receipt.message_id},
            )
        return SendOutcome(ok=True, message_id=receipt.message_id, dry_run=receipt.dry_run)

    def send_one(
        self, record: Any, default_status: AttendanceStatus = AttendanceStatus.PRESENT
    ) -> SendOutcome:
        """
        Validate, render and send a single attendance notification.

        Raises:
            RecordRejected: If the record fails validation
            TransportError: If the channel fails to send
        """
        valid = validate_record(record, default_status=default_status)
        envelope = build_envelope(valid, self.school_name, self.reply_to)
        return self._send(envelope, valid.student_id)

    def send_report(
        self, student_name: Any, parent_email: Any, report_data: Any
    ) -> SendOutcome:
        """
        Render a monthly report and email it as an attachment.

        Args:
            student_name: Student display name
            parent_email: Recipient address
            report_data: List of report lines, or a newline-separated string

        Raises:
            MissingField: If any argument is missing or blank
            InvalidEmail: If parent_email is malformed
            TransportError: If the channel fails to send
        """
        if self.report_builder is None:
            raise RuntimeError("NotificationSender has no report builder configured")

        for label, value in (
            ("studentName", student_name),
            ("parentEmail", parent_email),
            ("reportData", report_data),
        ):
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingField(label)
        if not isinstance(student_name, str) or not isinstance(parent_email, str):
            raise MissingField(message="Invalid or missing fields")
        if not isinstance(report_data, (str, list, tuple)):
            raise MissingField("reportData")

        email = normalize_email(parent_email)
        name = sanitize_name(student_name)
        if not name:
            raise MissingField("studentName")

        attachment = self.report_builder.build(name, split_report_lines(report_data))
        content = build_report_email(self.school_name)
        envelope = Envelope(
            to=email,
            subject=content.subject,
            text=content.text,
            html=content.html,
            attachments=[attachment],
            headers=build_headers(self.school_name, self.reply_to),
            reply_to=self.reply_to,
        )
        return self._send(envelope, None)
