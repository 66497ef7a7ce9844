"""Unit tests for Pydantic models."""

import unittest

from pydantic import ValidationError

from models import (
    AttendanceRecord,
    AttendanceStatus,
    BatchResult,
    Envelope,
    NotificationResult,
    SendOutcome,
    ValidRecord,
)


class TestAttendanceRecord(unittest.TestCase):
    """Tests for AttendanceRecord parsing."""

    def test_from_camel_case_payload(self):
        record = AttendanceRecord.from_payload(
            {
                "studentId": "SAH25009",
                "studentName": "Aditya Raj",
                "parentEmail": "parent@example.com",
                "status": "PRESENT",
                "occurredAt": "2025-08-25T09:00:00Z",
                "extra": "ignored",
            }
        )

        self.assertEqual(record.student_id, "SAH25009")
        self.assertEqual(record.occurred_at, "2025-08-25T09:00:00Z")

    def test_occurred_at_takes_precedence_over_legacy_keys(self):
        record = AttendanceRecord.from_payload(
            {"occurredAt": "2025-08-25", "timestamp": "2025-01-01"}
        )

        self.assertEqual(record.occurred_at, "2025-08-25")

    def test_all_fields_optional(self):
        record = AttendanceRecord.from_payload({})

        self.assertIsNone(record.student_id)
        self.assertIsNone(record.occurred_at)

    def test_numbers_coerced_to_strings(self):
        record = AttendanceRecord.from_payload({"studentId": 12345})

        self.assertEqual(record.student_id, "12345")

    def test_structured_timestamp_dropped(self):
        for value in (["x"], {"a": 1}):
            with self.subTest(value=value):
                record = AttendanceRecord.from_payload({"occurredAt": value})
                self.assertIsNone(record.occurred_at)

    def test_structured_legacy_timestamp_dropped(self):
        record = AttendanceRecord.from_payload({"timestamp": {"seconds": 1}})

        self.assertIsNone(record.occurred_at)

    def test_structured_values_rejected(self):
        with self.assertRaises(ValidationError):
            AttendanceRecord.from_payload({"studentId": ["A"]})


class TestValidRecord(unittest.TestCase):
    def test_pattern_enforced(self):
        with self.assertRaises(ValidationError):
            ValidRecord(
                student_id="ab",
                student_name="A",
                parent_email="a@b.co",
                status=AttendanceStatus.PRESENT,
            )


class TestResults(unittest.TestCase):
    """Tests for NotificationResult and BatchResult."""

    def test_batch_counts(self):
        results = [
            NotificationResult(student_id="A01", ok=True),
            NotificationResult(student_id="A02", ok=False, message="Invalid parentEmail"),
            NotificationResult(ok=False, message="Invalid or missing fields"),
        ]

        batch = BatchResult.from_results(results)

        self.assertEqual(batch.sent, 1)
        self.assertEqual(batch.total, 3)
        self.assertEqual(batch.failed, 2)

    def test_result_payload_omits_unset_fields(self):
        self.assertEqual(
            NotificationResult(ok=False, message="Missing fields").to_payload(),
            {"ok": False, "message": "Missing fields"},
        )

    def test_results_are_immutable(self):
        result = NotificationResult(student_id="A01", ok=True)

        with self.assertRaises(ValidationError):
            result.ok = False

    def test_send_outcome_payload(self):
        self.assertEqual(
            SendOutcome(message_id="abc").to_payload(),
            {"ok": True, "emailSent": True, "messageId": "abc"},
        )


class TestEnvelope(unittest.TestCase):
    def test_defaults(self):
        envelope = Envelope(to="a@b.co", subject="s", text="t", html="h")

        self.assertEqual(envelope.attachments, [])
        self.assertEqual(envelope.headers, {})
        self.assertIsNone(envelope.reply_to)
