"""
Inbound API for the attendance notifier.

NotificationService wires settings into the rate governor, mail channel,
dispatcher and sender, and exposes the three calls an HTTP layer maps onto
routes. Each call takes the decoded JSON body plus the caller identity and
returns a JSON-ready dict; call-level failures are raised as NotifierError
subclasses for the HTTP layer to map to status codes.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from models import AttendanceStatus
from notifications.dispatcher import Dispatcher
from notifications.errors import InvalidPayload
from notifications.mail_channel import (
    DRY_RUN_UNCONFIGURED,
    DryRunMailChannel,
    MailChannel,
    ResendMailChannel,
    SmtpMailChannel,
    format_sender,
)
from notifications.rate_governor import RateGovernor
from notifications.report_builder import PdfReportBuilder, ReportBuilder
from notifications.sender import NotificationSender
from shared.config import NotifierSettings

logger = logging.getLogger(__name__)

# HTTP status an adapter should use for each error code
STATUS_BY_ERROR_CODE = {
    "invalid_payload": 400,
    "empty_batch": 400,
    "missing_field": 400,
    "invalid_student_id": 400,
    "invalid_email": 400,
    "invalid_status": 400,
    "rate_limited": 429,
    "transport_error": 500,
}


def build_mail_channel(settings: NotifierSettings) -> MailChannel:
    """
    Pick the mail channel for the given settings.

    Dry-run mode always wins. Otherwise the configured (or detected) provider
    is used; with no usable credentials the service still runs, in dry-run
    mode marked as unconfigured.
    """
    if settings.dry_run:
        return DryRunMailChannel()

    provider = settings.mail_provider
    if provider is None:
        if settings.resend_api_key:
            provider = "resend"
        elif settings.smtp_user and settings.smtp_password:
            provider = "smtp"

    sender_email = settings.sender_email
    if provider == "resend" and settings.resend_api_key and sender_email:
        return ResendMailChannel(
            api_key=settings.resend_api_key,
            from_address=format_sender(settings.school_name, sender_email),
        )
    if provider == "smtp" and settings.smtp_user and settings.smtp_password and sender_email:
        return SmtpMailChannel(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            from_address=format_sender(settings.school_name, sender_email),
            timeout=settings.smtp_timeout,
        )

    logger.warning(
        "Mail transport not configured; sends will be simulated. "
        "Set RESEND_API_KEY or SMTP_USER/SMTP_PASS (or DRY_RUN=true).",
        extra={"event": "transport_unconfigured", "provider": provider},
    )
    return DryRunMailChannel(reason=DRY_RUN_UNCONFIGURED)


def _require_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise InvalidPayload("JSON object body required")
    return payload


class NotificationService:
    """
    Entry points for single, batch and report notifications.

    Args:
        settings: Runtime configuration
        channel: Mail channel override (built from settings when omitted)
        governor: Rate governor override (built from settings when omitted)
        report_builder: Report collaborator override
        sleep: Pause function handed to the dispatcher
    """

    def __init__(
        self,
        settings: NotifierSettings,
        channel: MailChannel | None = None,
        governor: RateGovernor | None = None,
        report_builder: ReportBuilder | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.channel = channel or build_mail_channel(settings)
        self.governor = governor or RateGovernor(
            window_seconds=settings.rate_window_seconds,
            max_requests=settings.rate_max_requests,
            sweep_interval=settings.rate_sweep_interval,
            max_callers=settings.rate_max_callers,
        )
        reply_to = settings.reply_to_email
        self.dispatcher = Dispatcher(
            self.channel,
            inter_message_delay=settings.inter_message_delay,
            school_name=settings.school_name,
            reply_to=reply_to,
            default_status=AttendanceStatus.ABSENT,
            sleep=sleep,
        )
        self.sender = NotificationSender(
            self.channel,
            report_builder=report_builder or PdfReportBuilder(settings.school_name),
            school_name=settings.school_name,
            reply_to=reply_to,
        )

    def start(self) -> None:
        self.governor.start()

    def stop(self) -> None:
        self.governor.stop()

    def send_attendance(self, payload: Any, caller_id: str) -> dict[str, Any]:
        """One attendance event (status defaults to PRESENT)."""
        self.governor.check(caller_id)
        body = _require_object(payload)
        return self.sender.send_one(body).to_payload()

    def send_absent_batch(self, payload: Any, caller_id: str) -> dict[str, Any]:
        """Batch of records, {"records": [...]} (status defaults to ABSENT)."""
        self.governor.check(caller_id)
        body = _require_object(payload)
        return self.dispatcher.send_batch(body.get("records")).to_payload()

    def send_report(self, payload: Any, caller_id: str) -> dict[str, Any]:
        """Monthly report, {"studentName", "parentEmail", "reportData"}."""
        self.governor.check(caller_id)
        body = _require_object(payload)
        return self.sender.send_report(
            body.get("studentName"), body.get("parentEmail"), body.get("reportData")
        ).to_payload()
