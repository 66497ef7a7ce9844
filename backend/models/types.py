"""Shared type definitions for type checking.

Uses NewType for identifiers so a student id is not mixed up with other
strings, and TypeAlias for purely structural types.
"""

from typing import NewType, TypeAlias

StudentID = NewType("StudentID", str)

EmailAddress: TypeAlias = str  # normalized to lowercase
DateString: TypeAlias = str  # ISO 8601 format
