"""PDF generation for duty sheets.

This module creates a printable one-worker, one-day PDF showing:
- The day's duties with times and flags
- The route visits in order, marking fixed and outdoor visits
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from fieldops.output.sheet_generator import DutySheet

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "anchor": (0.4, 0.4, 0.8),  # Blue
    "outdoor": (0.4, 0.7, 0.4),  # Green
    "indoor": (0.6, 0.6, 0.6),  # Gray
    "header_rule": (0.7, 0.7, 0.7),
}


def _require_reportlab():
    try:
        from reportlab.lib.pagesizes import letter
        from reportlab.pdfgen import canvas
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF generation. "
            "Install with: pip install reportlab"
        )
    return letter, canvas


class PDFGenerator:
    """Generates printable PDF duty sheets.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(sheet, "duties.pdf")
    """

    def __init__(
        self,
        page_width: float = 612,  # Letter portrait width (8.5")
        page_height: float = 792,  # Letter portrait height (11")
        margin: float = 36,  # 0.5 inch margins
        row_height: float = 16,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.row_height = row_height

    def generate(self, sheet: DutySheet, output_path: Union[str, Path]) -> None:
        """Generate the PDF and save it to a file."""
        letter, canvas = _require_reportlab()
        c = canvas.Canvas(str(output_path), pagesize=letter)
        self._draw_sheet(c, sheet)
        c.save()

    def generate_to_buffer(self, sheet: DutySheet) -> BytesIO:
        """Generate the PDF and return it as a bytes buffer."""
        letter, canvas = _require_reportlab()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=letter)
        self._draw_sheet(c, sheet)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_sheet(self, c, sheet: DutySheet) -> None:
        y = self._draw_header(c, sheet)

        y = self._section_title(c, "Duties", y)
        if not sheet.instances:
            c.setFont("Helvetica-Oblique", 10)
            c.drawString(self.margin, y, "No duties right now.")
            y -= self.row_height
        for instance in sheet.instances:
            y = self._ensure_room(c, sheet, y)
            c.setFont("Helvetica", 10)
            c.drawString(
                self.margin,
                y,
                f"{instance.start_time.strftime('%a %H:%M')}-{instance.end_time.strftime('%H:%M')}",
            )
            c.drawString(self.margin + 100, y, instance.title[:40])
            c.drawString(
                self.margin + 340,
                y,
                (instance.building_name or instance.building_id)[:28],
            )
            if instance.requires_photo:
                c.drawRightString(self.page_width - self.margin, y, "photo")
            y -= self.row_height

        if sheet.route is not None:
            y -= self.row_height
            y = self._section_title(c, sheet.route.route_name or sheet.route.id, y)
            for i, sequence in enumerate(sheet.route.sequences, 1):
                y = self._ensure_room(c, sheet, y)
                if not sequence.is_flexible:
                    color = COLORS["anchor"]
                elif sequence.has_weather_sensitive_operation:
                    color = COLORS["outdoor"]
                else:
                    color = COLORS["indoor"]
                c.setFillColorRGB(*color)
                c.rect(self.margin, y - 2, 8, 10, fill=1, stroke=0)
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica", 10)
                c.drawString(
                    self.margin + 14,
                    y,
                    f"{i:>2}. {sequence.arrival_time.strftime('%H:%M')}  "
                    f"{(sequence.building_name or sequence.building_id)[:36]}  "
                    f"({sequence.estimated_duration_minutes} min)",
                )
                y -= self.row_height

        c.showPage()

    def _draw_header(self, c, sheet: DutySheet) -> float:
        """Draw page header with worker and date; return the next baseline."""
        top = self.page_height - self.margin
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            top - 16,
            f"Duty Sheet - {sheet.schedule_date.strftime('%A, %B %d, %Y')}",
        )
        c.setFont("Helvetica", 10)
        c.drawString(self.margin, top - 32, f"Worker: {sheet.worker_id}")
        if sheet.weather is not None:
            current = sheet.weather.current
            c.drawString(
                self.margin + 200,
                top - 32,
                f"{current.condition}, wind {current.wind_mph:.0f} mph",
            )
        c.setStrokeColorRGB(*COLORS["header_rule"])
        c.line(self.margin, top - 40, self.page_width - self.margin, top - 40)
        return top - 60

    def _section_title(self, c, title: str, y: float) -> float:
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, title)
        return y - self.row_height - 4

    def _ensure_room(self, c, sheet: DutySheet, y: float) -> float:
        """Start a new page when the next row would cross the bottom margin."""
        if y > self.margin + self.row_height:
            return y
        c.showPage()
        return self._draw_header(c, sheet)
