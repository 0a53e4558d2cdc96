"""Report-construction engine turning test results into spreadsheet payloads."""

__version__ = "0.3.0"
