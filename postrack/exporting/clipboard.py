"""Clipboard-ready text for tracking numbers."""

from typing import Iterable

from postrack.models.tracking import TrackingRecord


def tracking_numbers_text(records: Iterable[TrackingRecord]) -> str:
    """All tracking numbers, one per line, in batch order."""
    return "\n".join(record.tracking_number for record in records)
