"""Excel-focused utilities for reporting."""

from .workbook_backend import XlsxSheetBackend

__all__ = ["XlsxSheetBackend"]
