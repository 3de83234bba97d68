"""
Spreadsheet export of tracking results.

Builds an .xlsx workbook with one row per record using openpyxl.
"""

from datetime import date
from io import BytesIO
from typing import Iterable

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from postrack.models.tracking import TrackingRecord

SHEET_TITLE = "Tracking POS"

NOT_FOUND_MESSAGE = "Tracking data not found"

PLACEHOLDER = "-"

# (header, column width in characters)
COLUMNS = [
    ("Tracking Number", 15),
    ("Status", 12),
    ("Service", 10),
    ("Date", 20),
    ("Shipper", 20),
    ("Receiver", 20),
    ("Latest Status", 40),
    ("Error Message", 30),
]

HEADERS = [header for header, _ in COLUMNS]

XLSX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
)


def export_row(record: TrackingRecord) -> dict[str, str]:
    """
    Flatten a record into one spreadsheet row.

    Records without shipment data under a 200 status are exported as
    ERROR with placeholders and the record's error message.
    """
    response = record.data
    if response is None or response.data is None or not response.is_found:
        return {
            "Tracking Number": record.tracking_number,
            "Status": "ERROR",
            "Service": PLACEHOLDER,
            "Date": PLACEHOLDER,
            "Shipper": PLACEHOLDER,
            "Receiver": PLACEHOLDER,
            "Latest Status": PLACEHOLDER,
            "Error Message": record.error or NOT_FOUND_MESSAGE,
        }

    summary = response.data.summary
    detail = response.data.detail
    latest = record.latest_history

    return {
        "Tracking Number": record.tracking_number,
        "Status": summary.status,
        "Service": summary.service,
        "Date": summary.date,
        "Shipper": detail.shipper,
        "Receiver": detail.receiver,
        "Latest Status": latest.desc if latest else PLACEHOLDER,
        "Error Message": "",
    }


def build_export_rows(records: Iterable[TrackingRecord]) -> list[dict[str, str]]:
    return [export_row(record) for record in records]


def build_workbook(records: Iterable[TrackingRecord]) -> Workbook:
    """
    Create the export workbook.

    Args:
        records: Records in display order

    Returns:
        Workbook with a header row, one data row per record and
        fixed column widths
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    sheet.append(HEADERS)
    for row in build_export_rows(records):
        sheet.append([row[header] for header in HEADERS])

    for index, (_, width) in enumerate(COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width

    return workbook


def workbook_bytes(records: Iterable[TrackingRecord]) -> bytes:
    """Serialize the export workbook to .xlsx bytes."""
    buffer = BytesIO()
    build_workbook(records).save(buffer)
    return buffer.getvalue()


def export_filename(today: date | None = None) -> str:
    """File name for a download made on the given day."""
    today = today or date.today()
    return f"tracking-pos-{today.isoformat()}.xlsx"
