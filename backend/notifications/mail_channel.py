"""
Outbound mail channels.

MailChannel is the port the dispatcher and sender depend on. Adapters:
- DryRunMailChannel: logs and reports success without sending
- ResendMailChannel: Resend API
- SmtpMailChannel: SMTP with STARTTLS (e.g. Gmail app passwords)

Every adapter raises TransportError on delivery failure and must be safe to
call from several threads at once.
"""

import logging
import smtplib
import ssl
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

import resend

from models import Envelope, SendReceipt
from notifications.errors import TransportError

logger = logging.getLogger(__name__)

DRY_RUN_REQUESTED = "requested"
DRY_RUN_UNCONFIGURED = "unconfigured"


class MailChannel(ABC):
    """Port for delivering a fully addressed envelope."""

    dry_run = False

    @abstractmethod
    def send(self, envelope: Envelope) -> SendReceipt:
        """
        Deliver one message.

        Returns:
            SendReceipt with the provider message id when known

        Raises:
            TransportError: If the message could not be handed off
        """
        pass


class DryRunMailChannel(MailChannel):
    """Channel that only logs what it would have sent."""

    dry_run = True

    def __init__(self, reason: str = DRY_RUN_REQUESTED) -> None:
        self.reason = reason

    def send(self, envelope: Envelope) -> SendReceipt:
        logger.info(
            "[DRY RUN] Would send to %s | %s",
            envelope.to,
            envelope.subject,
            extra={
                "event": "dry_run_send",
                "to": envelope.to,
                "attachments": [a.filename for a in envelope.attachments],
                "reason": self.reason,
            },
        )
        return SendReceipt(dry_run=True, dry_run_reason=self.reason)


class ResendMailChannel(MailChannel):
    """Channel backed by the Resend email API."""

    def __init__(self, api_key: str, from_address: str) -> None:
        resend.api_key = api_key
        self.from_address = from_address

    def send(self, envelope: Envelope) -> SendReceipt:
        params: dict = {
            "from": self.from_address,
            "to": envelope.to,
            "subject": envelope.subject,
            "html": envelope.html,
            "text": envelope.text,
        }
        if envelope.reply_to:
            params["reply_to"] = envelope.reply_to
        if envelope.headers:
            params["headers"] = dict(envelope.headers)
        if envelope.attachments:
            params["attachments"] = [
                {"filename": a.filename, "content": list(a.content)}
                for a in envelope.attachments
            ]

        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise TransportError(str(e) or "send failed") from e

        return SendReceipt(message_id=response.get("id"))


class SmtpMailChannel(MailChannel):
    """
    Channel that opens one STARTTLS SMTP connection per message.

    A fresh connection per send keeps the channel thread-safe; the timeout
    bounds every network operation so a send never hangs.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.timeout = timeout
        self._sleep = sleep

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            server.starttls(context=ssl.create_default_context())
            server.login(self.username, self.password)
        except Exception:
            server.close()
            raise
        return server

    def build_message(self, envelope: Envelope) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_address
        msg["To"] = envelope.to
        msg["Subject"] = envelope.subject
        msg["Message-ID"] = make_msgid(domain=self.host)
        if envelope.reply_to:
            msg["Reply-To"] = envelope.reply_to
        for name, value in envelope.headers.items():
            msg[name] = value

        msg.set_content(envelope.text)
        msg.add_alternative(envelope.html, subtype="html")
        for attachment in envelope.attachments:
            maintype, _, subtype = attachment.content_type.partition("/")
            msg.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return msg

    def send(self, envelope: Envelope) -> SendReceipt:
        msg = self.build_message(envelope)
        try:
            with self._connect() as server:
                server.send_message(msg, to_addrs=[envelope.to])
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(str(e) or "send failed") from e
        return SendReceipt(message_id=msg["Message-ID"])

    def verify(self, retries: int = 3, backoff_seconds: float = 2.0) -> bool:
        """
        Check that the server accepts our credentials.

        Retries with a linearly growing pause between attempts. Returns False
        after the last failure instead of raising; sends will then fail per
        message.
        """
        for attempt in range(1, retries + 1):
            try:
                with self._connect() as server:
                    server.noop()
                logger.info("SMTP connection verified", extra={"event": "smtp_verified"})
                return True
            except (smtplib.SMTPException, OSError) as e:
                logger.warning(
                    "SMTP verification attempt %d failed: %s",
                    attempt,
                    e,
                    extra={"event": "smtp_verify_failed", "attempt": attempt},
                )
                if attempt < retries:
                    self._sleep(backoff_seconds * attempt)

        logger.error(
            "SMTP verification failed after %d attempts, sending may not work",
            retries,
            extra={"event": "smtp_verify_failed", "attempt": retries},
        )
        return False


def format_sender(from_name: str, from_email: str) -> str:
    return formataddr((from_name, from_email))
