"""
Weekly Brief PDF Generation Service

Renders a weekly brief with ReportLab. Layout is a fixed vertical cursor:
``layout_brief`` produces positioned text lines (pure, easy to test) and
``render_brief_pdf`` replays them onto a canvas.
"""

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from mediecho.timeutils import short_date, short_datetime

PRODUCT_TITLE = "MediEcho Weekly Health Brief"
ATTRIBUTION = "Generated by MediEcho - Your Privacy-First Health Journal"

TOP_OFFSET = 50
BOTTOM_MARGIN = 100
FOOTER_Y = 50
MAX_PDF_HIGHLIGHTS = 5

FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

BLACK = (0, 0, 0)
TITLE_BLUE = (0.15, 0.38, 0.92)
MUTED = (0.4, 0.4, 0.4)
ALERT_RED = (0.8, 0.2, 0.2)
FOOTER_GRAY = (0.5, 0.5, 0.5)
FOOTER_LIGHT = (0.6, 0.6, 0.6)


@dataclass(frozen=True)
class TextLine:
    page: int
    x: float
    y: float
    text: str
    size: int = 12
    bold: bool = False
    color: Tuple[float, float, float] = BLACK


class PageCursor:
    """Tracks the current page and vertical position while laying out."""

    def __init__(self, page_height: float):
        self.top = page_height - TOP_OFFSET
        self.page = 1
        self.y = self.top
        self.lines: List[TextLine] = []

    def draw(self, text: str, x: float, **style) -> None:
        self.lines.append(TextLine(self.page, x, self.y, text, **style))

    def draw_at(self, text: str, x: float, y: float, **style) -> None:
        self.lines.append(TextLine(self.page, x, y, text, **style))

    def move(self, dy: float) -> None:
        self.y -= dy

    def break_page_if_needed(self) -> bool:
        """Start a new page once the cursor has passed the bottom margin."""
        if self.y < BOTTOM_MARGIN:
            self.page += 1
            self.y = self.top
            return True
        return False


def layout_brief(
    recipient: str,
    summary: Dict[str, Any],
    week_start: datetime,
    week_end: datetime,
    generated_at: datetime,
    tz_name: str = "UTC",
    page_size: Tuple[float, float] = letter,
) -> List[TextLine]:
    """
    Lay out a weekly brief.

    Args:
        recipient: Name (or email) shown in the title block
        summary: Output of summarize_logs
        week_start: Window start (naive UTC)
        week_end: Window end (naive UTC)
        generated_at: Generation timestamp for the footer (naive UTC)
        tz_name: Timezone used to print dates
        page_size: (width, height) in points

    Returns:
        Positioned text lines in drawing order
    """
    _, height = page_size
    cur = PageCursor(height)

    # Title block
    cur.draw(PRODUCT_TITLE, 50, size=24, bold=True, color=TITLE_BLUE)
    cur.move(30)
    cur.draw(
        f"{short_date(week_start, tz_name)} - {short_date(week_end, tz_name)}",
        50,
        size=14,
    )
    cur.move(20)
    cur.draw(f"Prepared for: {recipient}", 50, color=MUTED)
    cur.move(40)

    # Summary block
    cur.draw("Weekly Summary", 50, size=18, bold=True)
    cur.move(25)
    cur.draw(f"Total Entries: {summary['total_logs']}", 60)
    cur.move(18)
    cur.draw(f"Average Intensity: {summary['avg_intensity']}/10", 60)
    cur.move(25)

    cur.draw("Entries by Type:", 60, bold=True)
    cur.move(18)
    for log_type, count in summary["by_type"].items():
        cur.draw(f"  • {log_type.capitalize()}: {count}", 70)
        cur.move(15)
    cur.move(15)

    # Trends
    if summary["trends"]:
        cur.draw("Observations:", 60, bold=True)
        cur.move(18)
        for trend in summary["trends"]:
            cur.draw(f"  • {trend}", 70)
            cur.move(15)
        cur.move(15)

    # Highlights
    if summary["highlights"]:
        cur.draw("Notable Entries:", 60, bold=True, color=ALERT_RED)
        cur.move(18)
        for highlight in summary["highlights"][:MAX_PDF_HIGHLIGHTS]:
            date_str = short_date(_as_datetime(highlight["date"]), tz_name)
            cur.draw(
                f"  [{date_str}] {highlight['type']}: {highlight['text']}",
                70,
                size=10,
            )
            cur.move(15)
            cur.break_page_if_needed()

    # Footer on the final page
    cur.draw_at(ATTRIBUTION, 50, FOOTER_Y, size=10, color=FOOTER_GRAY)
    cur.draw_at(
        f"Generated on: {short_datetime(generated_at, tz_name)}",
        50,
        FOOTER_Y - 12,
        size=8,
        color=FOOTER_LIGHT,
    )

    return cur.lines


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def render_lines(lines: List[TextLine], page_size: Tuple[float, float] = letter) -> bytes:
    """Draw laid-out lines onto a PDF canvas and return the document bytes."""
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=page_size)
    pdf.setTitle(PRODUCT_TITLE)
    pdf.setAuthor("MediEcho")

    page = 1
    for line in lines:
        while line.page > page:
            pdf.showPage()
            page += 1
        pdf.setFont(BOLD_FONT if line.bold else FONT, line.size)
        pdf.setFillColorRGB(*line.color)
        pdf.drawString(line.x, line.y, line.text)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def render_brief_pdf(
    recipient: str,
    summary: Dict[str, Any],
    week_start: datetime,
    week_end: datetime,
    generated_at: datetime,
    tz_name: str = "UTC",
    page_size: Optional[Tuple[float, float]] = None,
) -> bytes:
    """Render a weekly brief to PDF bytes."""
    page_size = page_size or letter
    lines = layout_brief(
        recipient,
        summary,
        week_start,
        week_end,
        generated_at,
        tz_name=tz_name,
        page_size=page_size,
    )
    return render_lines(lines, page_size=page_size)
