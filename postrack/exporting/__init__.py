"""
Export collaborators: spreadsheet download and clipboard text.
"""

from postrack.exporting.clipboard import tracking_numbers_text
from postrack.exporting.excel import (
    XLSX_MEDIA_TYPE,
    build_export_rows,
    build_workbook,
    export_filename,
    workbook_bytes,
)

__all__ = [
    "XLSX_MEDIA_TYPE",
    "build_export_rows",
    "build_workbook",
    "export_filename",
    "tracking_numbers_text",
    "workbook_bytes",
]
