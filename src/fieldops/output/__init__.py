"""Output generation for duty sheets (text, PDF)."""

from fieldops.output.pdf_generator import PDFGenerator
from fieldops.output.sheet_generator import DutySheet, DutySheetGenerator

__all__ = [
    "DutySheet",
    "DutySheetGenerator",
    "PDFGenerator",
]
