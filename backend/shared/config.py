"""
Settings loaded from the environment (.env supported).

This is the only module that reads os.environ. Everything else receives
values through NotifierSettings or constructor arguments.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class NotifierSettings(BaseModel):
    """Runtime configuration for the notification service."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    dry_run: bool = False
    inter_message_delay: float = Field(0.15, ge=0)

    rate_window_seconds: float = Field(60.0, gt=0)
    rate_max_requests: int = Field(20, ge=1)
    rate_sweep_interval: float = Field(60.0, gt=0)
    rate_max_callers: int = Field(10_000, ge=1)

    mail_provider: str | None = Field(None, pattern="^(resend|smtp)$")
    resend_api_key: str | None = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = Field(587, ge=1, le=65535)
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_timeout: float = Field(30.0, gt=0)

    school_name: str = "Saamarthya Academy"
    from_email: str | None = None
    reply_to: str | None = None

    log_level: str = "INFO"

    @property
    def sender_email(self) -> str | None:
        return self.from_email or self.smtp_user

    @property
    def reply_to_email(self) -> str | None:
        return self.reply_to or self.sender_email


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else None


def load_settings(env_file: str | None = None) -> NotifierSettings:
    """
    Build settings from environment variables.

    Args:
        env_file: Optional path to a .env file (defaults to dotenv's lookup)

    Returns:
        NotifierSettings

    Raises:
        ValueError: If a numeric or enumerated variable is invalid
    """
    load_dotenv(env_file)

    values: dict = {
        "dry_run": _env_bool("DRY_RUN"),
        "mail_provider": _env_str("MAIL_PROVIDER"),
        "resend_api_key": _env_str("RESEND_API_KEY"),
        "smtp_user": _env_str("SMTP_USER"),
        "smtp_password": _env_str("SMTP_PASS"),
        "from_email": _env_str("NOTIFICATION_FROM_EMAIL"),
        "reply_to": _env_str("NOTIFICATION_REPLY_TO"),
    }

    optional = {
        "inter_message_delay": "INTER_MESSAGE_DELAY",
        "rate_window_seconds": "RATE_LIMIT_WINDOW",
        "rate_max_requests": "RATE_LIMIT_MAX_REQUESTS",
        "rate_sweep_interval": "RATE_LIMIT_SWEEP_INTERVAL",
        "rate_max_callers": "RATE_LIMIT_MAX_CALLERS",
        "smtp_host": "SMTP_HOST",
        "smtp_port": "SMTP_PORT",
        "smtp_timeout": "SMTP_TIMEOUT",
        "school_name": "SCHOOL_NAME",
        "log_level": "LOG_LEVEL",
    }
    for field, env_name in optional.items():
        value = _env_str(env_name)
        if value is not None:
            values[field] = value

    if values["mail_provider"]:
        values["mail_provider"] = values["mail_provider"].lower()

    # pydantic's ValidationError is a ValueError subclass
    return NotifierSettings(**values)
