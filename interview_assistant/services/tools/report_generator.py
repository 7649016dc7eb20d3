"""
PDF rendering of the end-of-interview report.

Draws straight onto a reportlab canvas: title, overall feedback, strengths,
weaknesses, the question-type breakdown and the full conversation log.
"""
import io
import logging
import re
import textwrap
from datetime import datetime
from typing import List, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas

from interview_assistant.core.logger import log_execution_time
from interview_assistant.schemas.interview import ChatMessage, InterviewReport, MessageRole

logger = logging.getLogger(__name__)

TITLE = "Interview Report"
NO_FEEDBACK = "No analysis available."
NO_STRENGTHS = "No strengths recorded."
NO_WEAKNESSES = "No weaknesses recorded."

ROLE_LABELS = {
    MessageRole.USER: "Candidate",
    MessageRole.ASSISTANT: "Interviewer",
}

# Korean CID font covers Hangul and Latin; Helvetica is the fallback
CID_FONT = "HYSMyeongJo-Medium"
FALLBACK_FONT = "Helvetica"

BAR_COLORS = (colors.HexColor("#2196F3"), colors.HexColor("#4CAF50"), colors.HexColor("#FF9800"))

MARGIN_X = 40
MARGIN_Y = 50
LINE_HEIGHT = 15
WRAP_WIDTH = 95

_MD_PATTERNS = (
    (re.compile(r"```[a-zA-Z]*\n?"), ""),
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),
    (re.compile(r"^\s{0,3}#{1,6}\s*", re.MULTILINE), ""),
    (re.compile(r"^\s{0,3}>\s?", re.MULTILINE), ""),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"(\*\*|__)(.+?)\1"), r"\2"),
    (re.compile(r"(?<![\w*])([*_])(?!\s)(.+?)(?<!\s)\1(?![\w*])"), r"\2"),
    (re.compile(r"`([^`]*)`"), r"\1"),
    (re.compile(r"<[^>]+>"), ""),
)


def strip_markdown(text: Optional[str]) -> str:
    """Reduce markdown to plain text for the PDF."""
    if not text:
        return ""
    for pattern, replacement in _MD_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


def _register_font() -> str:
    try:
        pdfmetrics.registerFont(UnicodeCIDFont(CID_FONT))
        return CID_FONT
    except Exception as e:
        logger.warning(f"CID font '{CID_FONT}' unavailable, using {FALLBACK_FONT}: {e}")
        return FALLBACK_FONT


class _PdfWriter:
    """Top-to-bottom line writer with automatic page breaks."""

    def __init__(self, buffer: io.BytesIO, font_name: str):
        self.pdf = canvas.Canvas(buffer, pagesize=A4)
        self.width, self.height = A4
        self.font_name = font_name
        self.y = self.height - MARGIN_Y
        self.page = 1

    def _ensure_space(self, needed: float) -> None:
        if self.y - needed < MARGIN_Y:
            self.pdf.showPage()
            self.page += 1
            self.y = self.height - MARGIN_Y

    def heading(self, text: str, size: int = 16) -> None:
        self._ensure_space(size + LINE_HEIGHT)
        self.y -= 6
        self.pdf.setFont(self.font_name, size)
        self.pdf.setFillColor(colors.black)
        self.pdf.drawString(MARGIN_X, self.y, text)
        self.y -= size + 4

    def paragraph(self, text: str, indent: int = 10, size: int = 11, color=colors.black) -> None:
        self.pdf.setFillColor(color)
        for raw_line in text.splitlines() or [""]:
            for line in textwrap.wrap(raw_line, WRAP_WIDTH) or [""]:
                self._ensure_space(LINE_HEIGHT)
                self.pdf.setFont(self.font_name, size)
                self.pdf.drawString(MARGIN_X + indent, self.y, line)
                self.y -= LINE_HEIGHT
        self.pdf.setFillColor(colors.black)

    def bullets(self, items: Sequence[str], empty_text: str) -> None:
        cleaned = [strip_markdown(item) for item in items if item and item.strip()]
        for item in cleaned or [empty_text]:
            self.paragraph(f"- {item}")

    def bar_row(self, label: str, value: int, percentage: float, color) -> None:
        self._ensure_space(LINE_HEIGHT)
        self.pdf.setFont(self.font_name, 11)
        self.pdf.drawString(MARGIN_X + 10, self.y, f"{label}:")
        # One block per 5%, at least one block
        blocks = max(1, int(percentage / 5))
        self.pdf.setFillColor(color)
        self.pdf.rect(MARGIN_X + 110, self.y - 1, blocks * 7, 10, stroke=0, fill=1)
        self.pdf.setFillColor(colors.black)
        self.pdf.drawString(MARGIN_X + 270, self.y, f"{value} ({percentage:.1f}%)")
        self.y -= LINE_HEIGHT

    def spacer(self, amount: float = 8) -> None:
        self.y -= amount

    def footer(self, text: str) -> None:
        self.pdf.setFont(self.font_name, 9)
        self.pdf.setFillColor(colors.grey)
        self.pdf.drawCentredString(self.width / 2, MARGIN_Y / 2, text)
        self.pdf.setFillColor(colors.black)

    def save(self) -> None:
        self.pdf.save()


def _chart_section(writer: _PdfWriter, report: InterviewReport) -> None:
    chart = report.chart_data
    total = sum(chart.values)
    if not chart.labels or total <= 0:
        return
    writer.heading("Question Type Breakdown")
    for i, (label, value) in enumerate(zip(chart.labels, chart.values)):
        percentage = value / total * 100
        writer.bar_row(label, value, percentage, BAR_COLORS[i % len(BAR_COLORS)])
    writer.spacer()


def _conversation_section(writer: _PdfWriter, chat_history: List[ChatMessage]) -> None:
    visible = [m for m in chat_history if m.role in ROLE_LABELS]
    if not visible:
        return
    writer.heading("Conversation Log")
    for message in visible:
        label_color = colors.HexColor("#1565C0") if message.role == MessageRole.USER else colors.HexColor("#2E7D32")
        writer.paragraph(f"[{ROLE_LABELS[message.role]}]", indent=0, color=label_color)
        writer.paragraph(strip_markdown(message.content))
        writer.spacer(4)


@log_execution_time
def render_interview_report_pdf(report: InterviewReport, chat_history: Optional[List[ChatMessage]] = None) -> bytes:
    """
    Render an interview report and its transcript to PDF.

    Args:
        report: The synthesized interview report.
        chat_history: Transcript to append as the conversation log.

    Returns:
        The PDF document as bytes.
    """
    buffer = io.BytesIO()
    writer = _PdfWriter(buffer, _register_font())
    generated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    writer.heading(TITLE, size=22)
    writer.spacer()

    writer.heading("Overall Feedback")
    writer.paragraph(strip_markdown(report.overall_feedback) or NO_FEEDBACK)
    writer.spacer()

    writer.heading("Strengths")
    writer.bullets(report.strengths, NO_STRENGTHS)
    writer.spacer()

    writer.heading("Weaknesses")
    writer.bullets(report.weaknesses, NO_WEAKNESSES)
    writer.spacer()

    _chart_section(writer, report)
    _conversation_section(writer, chat_history or [])

    writer.footer(f"Generated: {generated_at}")
    writer.save()

    logger.info(f"Rendered interview report PDF ({writer.page} pages)")
    return buffer.getvalue()
