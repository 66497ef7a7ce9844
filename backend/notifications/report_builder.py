"""
Monthly attendance report rendering.

ReportBuilder is the collaborator the report sender calls; PdfReportBuilder
renders the report in memory with fpdf2, so there is no file to clean up.
"""

import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from models import Attachment
from notifications.content_builder import DEFAULT_SCHOOL_NAME, format_date_time


def split_report_lines(report_data: Sequence[str] | str) -> list[str]:
    """Accept a list of lines or one newline-separated string."""
    if isinstance(report_data, str):
        return report_data.split("\n")
    return [str(line) for line in report_data]


def report_filename(student_name: str, now_ms: int) -> str:
    safe = re.sub(r"[^\w\-]+", "_", student_name or "student")
    return f"{safe}_monthly_{now_ms}.pdf"


class ReportBuilder(ABC):
    """Renders report lines into an attachment."""

    @abstractmethod
    def build(self, student_name: str, lines: list[str]) -> Attachment:
        pass


class PdfReportBuilder(ReportBuilder):
    """Single-column PDF: title, student, generation time, numbered records."""

    def __init__(
        self,
        school_name: str = DEFAULT_SCHOOL_NAME,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.school_name = school_name
        self._clock = clock

    @staticmethod
    def _latin1(text: str) -> str:
        # Core PDF fonts only cover latin-1
        return text.encode("latin-1", errors="replace").decode("latin-1")

    def _line(self, pdf: FPDF, text: str, size: int = 12, align: str = "L") -> None:
        pdf.set_font("Helvetica", size=size)
        pdf.multi_cell(
            0, size * 0.6, self._latin1(text), align=align,
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )

    def render(self, student_name: str, lines: list[str]) -> bytes:
        pdf = FPDF()
        pdf.set_margins(14, 14)
        pdf.add_page()

        self._line(pdf, "Monthly Attendance Report", size=20, align="C")
        pdf.ln(6)
        self._line(pdf, f"Student: {student_name}")
        self._line(pdf, f"Generated On: {format_date_time(None)}")
        pdf.ln(6)
        self._line(pdf, "Attendance Records:", size=14)
        pdf.ln(3)

        if not lines:
            self._line(pdf, "No records provided.")
        for i, line in enumerate(lines, 1):
            self._line(pdf, f"{i}. {line}")

        pdf.ln(6)
        self._line(pdf, f"Best regards,\n{self.school_name}")
        return bytes(pdf.output())

    def build(self, student_name: str, lines: list[str]) -> Attachment:
        now_ms = int(self._clock() * 1000)
        return Attachment(
            filename=report_filename(student_name, now_ms),
            content=self.render(student_name, lines),
            content_type="application/pdf",
        )
