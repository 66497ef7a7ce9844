"""
Batch dispatcher for attendance notifications.

Processes records strictly in order: validate, render, send, then pause for
the inter-message delay. A rejected record or a failed send is recorded in
the result list and the batch moves on; only a malformed batch (not a list,
or empty) fails the call.
"""

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from models import (
    AttendanceStatus,
    BatchResult,
    Envelope,
    NotificationResult,
    SendReceipt,
    ValidRecord,
)
from notifications.content_builder import DEFAULT_SCHOOL_NAME, build_notification
from notifications.errors import EmptyBatch, InvalidPayload, RecordRejected, TransportError
from notifications.mail_channel import MailChannel
from notifications.validator import echo_student_id, validate_record

logger = logging.getLogger(__name__)

DEFAULT_INTER_MESSAGE_DELAY = 0.15


def build_headers(school_name: str, reply_to: str | None) -> dict[str, str]:
    """Deliverability headers shared by every outbound notification."""
    headers = {
        "X-Mailer": f"{school_name} Attendance System v1.0",
        "X-Priority": "3",
    }
    if reply_to:
        headers["List-Unsubscribe"] = f"<mailto:{reply_to}?subject=Unsubscribe>"
    return headers


def build_envelope(
    record: ValidRecord,
    school_name: str = DEFAULT_SCHOOL_NAME,
    reply_to: str | None = None,
) -> Envelope:
    """Render a validated record into a ready-to-send envelope."""
    content = build_notification(
        record.status,
        record.student_id,
        record.student_name,
        record.occurred_at,
        school_name,
    )
    return Envelope(
        to=record.parent_email,
        subject=content.subject,
        text=content.text,
        html=content.html,
        headers=build_headers(school_name, reply_to),
        reply_to=reply_to,
    )


class Dispatcher:
    """
    Sends one notification per attendance record with per-record accounting.

    Args:
        channel: Mail channel used for every send
        inter_message_delay: Seconds to pause after each send attempt
        school_name: Name used in rendered content and headers
        reply_to: Reply-To address for outbound messages
        default_status: Status assumed for records that carry none
        sleep: Pause function (replaceable in tests)
    """

    def __init__(
        self,
        channel: MailChannel,
        inter_message_delay: float = DEFAULT_INTER_MESSAGE_DELAY,
        school_name: str = DEFAULT_SCHOOL_NAME,
        reply_to: str | None = None,
        default_status: AttendanceStatus = AttendanceStatus.ABSENT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if inter_message_delay < 0:
            raise ValueError("inter_message_delay must not be negative")
        self.channel = channel
        self.inter_message_delay = inter_message_delay
        self.school_name = school_name
        self.reply_to = reply_to
        self.default_status = default_status
        self._sleep = sleep

    def send_batch(self, records: Any) -> BatchResult:
        """
        Send a notification for every record.

        Args:
            records: List of attendance records (dicts or AttendanceRecord)

        Returns:
            BatchResult with one result per record, in input order

        Raises:
            InvalidPayload: If records is not a list or tuple
            EmptyBatch: If records is empty
        """
        if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
            raise InvalidPayload("records[] required")
        if len(records) == 0:
            raise EmptyBatch()

        results: list[NotificationResult] = []
        for index, raw in enumerate(records):
            results.append(self._process(index, raw))

        batch = BatchResult.from_results(results)
        logger.info(
            "Batch complete: %d/%d sent",
            batch.sent,
            batch.total,
            extra={"event": "batch_completed", "sent": batch.sent, "total": batch.total},
        )
        return batch

    def _process(self, index: int, raw: Any) -> NotificationResult:
        try:
            record = validate_record(raw, default_status=self.default_status)
        except RecordRejected as e:
            student_id = echo_student_id(raw)
            logger.warning(
                "Record %d rejected: %s",
                index,
                e.message,
                extra={"event": "record_rejected", "index": index,
                       "student_id": student_id, "reason": e.code},
            )
            return NotificationResult(student_id=student_id, ok=False, message=e.message)

        try:
            receipt = self._deliver(record)
        except TransportError as e:
            logger.error(
                "Send failed for %s: %s",
                record.student_id,
                e.message,
                extra={"event": "send_failed", "index": index, "student_id": record.student_id},
            )
            return NotificationResult(student_id=record.student_id, ok=False, message=e.message)
        finally:
            # Pace every send attempt, successful or not
            self._sleep(self.inter_message_delay)

        if not receipt.dry_run:
            logger.info(
                "%s email sent for %s",
                record.status.value.capitalize(),
                record.student_id,
                extra={"event": "send_succeeded", "index": index,
                       "student_id": record.student_id, "message_id": receipt.message_id},
            )
        return NotificationResult(
            student_id=record.student_id,
            ok=True,
            dry_run=receipt.dry_run,
            dry_run_reason=receipt.dry_run_reason,
        )

    def _deliver(self, record: ValidRecord) -> SendReceipt:
        envelope = build_envelope(record, self.school_name, self.reply_to)
        return self.channel.send(envelope)
