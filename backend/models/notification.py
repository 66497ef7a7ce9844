"""Pydantic models for outbound notifications and their results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from models.types import EmailAddress


class RenderedNotification(BaseModel):
    """Subject and bodies for one notification."""

    model_config = ConfigDict(frozen=True)

    subject: str
    text: str
    html: str


class Attachment(BaseModel):
    """In-memory file attached to an outbound message."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1)
    content: bytes
    content_type: str = "application/pdf"


class Envelope(BaseModel):
    """Fully addressed outbound message handed to a mail channel."""

    model_config = ConfigDict(frozen=True)

    to: EmailAddress
    subject: str
    text: str
    html: str
    attachments: list[Attachment] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    reply_to: EmailAddress | None = None


class SendReceipt(BaseModel):
    """What a mail channel reports after accepting a message."""

    model_config = ConfigDict(frozen=True)

    message_id: str | None = None
    dry_run: bool = False
    dry_run_reason: str | None = None


class NotificationResult(BaseModel):
    """Outcome of one record within a batch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    student_id: str | None = Field(None, alias="studentId")
    ok: bool
    dry_run: bool = Field(False, alias="dryRun")
    dry_run_reason: str | None = Field(None, alias="dryRunReason")
    message: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict; optional fields are omitted when unset."""
        return self.model_dump(by_alias=True, exclude_defaults=True)


class BatchResult(BaseModel):
    """Aggregated outcome of a batch, one result per input record."""

    model_config = ConfigDict(frozen=True)

    sent: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    results: list[NotificationResult]

    @classmethod
    def from_results(cls, results: list[NotificationResult]) -> "BatchResult":
        return cls(
            sent=sum(1 for r in results if r.ok),
            total=len(results),
            results=results,
        )

    @property
    def failed(self) -> int:
        return self.total - self.sent

    def to_payload(self) -> dict[str, Any]:
        return {
            "ok": True,
            "sent": self.sent,
            "total": self.total,
            "results": [r.to_payload() for r in self.results],
        }


class SendOutcome(BaseModel):
    """Outcome of the single-record and report paths."""

    model_config = ConfigDict(frozen=True)

    ok: bool = True
    message_id: str | None = None
    dry_run: bool = False

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"ok": self.ok, "emailSent": self.ok}
        if self.message_id:
            payload["messageId"] = self.message_id
        if self.dry_run:
            payload["dryRun"] = True
        return payload
