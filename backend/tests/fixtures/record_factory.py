"""Factory functions for creating test attendance payloads."""

from typing import Any, Dict, List, Optional


def create_test_record(
    student_id: Optional[str] = "SAH25009",
    student_name: Optional[str] = "Aditya Raj",
    parent_email: Optional[str] = "parent@example.com",
    status: Optional[str] = None,
    occurred_at: Optional[str] = None,
    **overrides,
) -> Dict[str, Any]:
    """Factory for a raw attendance record as a JSON client would send it."""
    record: Dict[str, Any] = {
        "studentId": student_id,
        "studentName": student_name,
        "parentEmail": parent_email,
    }
    if status is not None:
        record["status"] = status
    if occurred_at is not None:
        record["occurredAt"] = occurred_at
    record.update(overrides)
    return record


def create_test_batch(count: int = 3, **overrides) -> List[Dict[str, Any]]:
    """Factory for a batch of distinct, valid records."""
    return [
        create_test_record(
            student_id=f"SAH2500{i}",
            student_name=f"Student {i}",
            parent_email=f"parent{i}@example.com",
            **overrides,
        )
        for i in range(1, count + 1)
    ]
