"""
Integration tests for the full notification flow.

Runs real validation, rendering, dispatch and PDF generation against a
patched Resend API.
"""

import unittest
from unittest.mock import Mock, patch

from notifications.content_builder import ABSENT_SUBJECT, PRESENT_SUBJECT, REPORT_SUBJECT
from notifications.service import NotificationService
from shared.config import NotifierSettings
from tests.fixtures.record_factory import create_test_batch, create_test_record


@patch("notifications.mail_channel.resend.Emails.send")
class TestAttendanceFlowWithResend(unittest.TestCase):
    """End-to-end through the Resend channel."""

    def setUp(self):
        self.settings = NotifierSettings(
            resend_api_key="re_test",
            from_email="noreply@school.example",
            reply_to="office@school.example",
        )
        self.sleep = Mock()
        self.service = NotificationService(self.settings, sleep=self.sleep)

    def test_single_present_notice(self, mock_send):
        mock_send.return_value = {"id": "email_1"}

        response = self.service.send_attendance(create_test_record(), "10.0.0.1")

        self.assertEqual(response["messageId"], "email_1")
        params = mock_send.call_args[0][0]
        self.assertEqual(params["subject"], PRESENT_SUBJECT)
        self.assertEqual(params["from"], "Saamarthya Academy <noreply@school.example>")
        self.assertIn("Aditya Raj", params["text"])
        self.assertIn("SAH25009", params["text"])
        self.assertIn("PRESENT", params["text"])
        self.assertEqual(
            params["headers"]["List-Unsubscribe"],
            "<mailto:office@school.example?subject=Unsubscribe>",
        )

    def test_batch_with_partial_failures(self, mock_send):
        def fake_send(params):
            if params["to"] == "parent2@example.com":
                raise Exception("Mailbox unavailable")
            return {"id": f"email_{params['to']}"}

        mock_send.side_effect = fake_send
        records = create_test_batch(4, dateISO="2025-08-25")
        records[0]["parentEmail"] = "not-an-email"

        response = self.service.send_absent_batch({"records": records}, "10.0.0.1")

        self.assertEqual(response["sent"], 2)
        self.assertEqual(response["total"], 4)
        self.assertEqual(
            [r["ok"] for r in response["results"]], [False, False, True, True]
        )
        self.assertEqual(response["results"][1]["message"], "Mailbox unavailable")
        self.assertEqual(
            [r["studentId"] for r in response["results"]],
            ["SAH25001", "SAH25002", "SAH25003", "SAH25004"],
        )
        self.assertEqual(mock_send.call_count, 3)
        self.assertEqual(self.sleep.call_count, 3)
        for call in mock_send.call_args_list:
            self.assertEqual(call.args[0]["subject"], ABSENT_SUBJECT)
            self.assertIn("Monday, 25 August 2025", call.args[0]["text"])

    def test_report_with_pdf(self, mock_send):
        mock_send.return_value = {"id": "email_r"}

        self.service.send_report(
            {
                "studentName": "Aditya Raj",
                "parentEmail": "parent@example.com",
                "reportData": "01 Aug: PRESENT\n02 Aug: ABSENT",
            },
            "10.0.0.1",
        )

        params = mock_send.call_args[0][0]
        self.assertEqual(params["subject"], REPORT_SUBJECT)
        attachment = params["attachments"][0]
        self.assertTrue(attachment["filename"].startswith("Aditya_Raj_monthly_"))
        self.assertEqual(bytes(attachment["content"][:4]), b"%PDF")


class TestAttendanceFlowUnconfigured(unittest.TestCase):
    """Without credentials the service simulates sends and says so."""

    def test_batch_marks_unconfigured_dry_run(self):
        with self.assertLogs("notifications.service", level="WARNING"):
            service = NotificationService(NotifierSettings(), sleep=Mock())

        response = service.send_absent_batch({"records": [create_test_record()]}, "cli")

        self.assertEqual(
            response["results"],
            [{"studentId": "SAH25009", "ok": True, "dryRun": True, "dryRunReason": "unconfigured"}],
        )
