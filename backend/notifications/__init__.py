"""
Attendance notification system.

This package handles:
- Validating attendance records
- Building PRESENT / ABSENT email content and monthly PDF reports
- Sending through a pluggable mail channel (Resend, SMTP or dry run)
- Batch dispatch with per-record accounting and outbound pacing
- Per-caller inbound rate limiting
"""

from .dispatcher import Dispatcher
from .rate_governor import RateGovernor
from .sender import NotificationSender
from .service import NotificationService

__all__ = [
    'Dispatcher',
    'NotificationSender',
    'NotificationService',
    'RateGovernor',
]
