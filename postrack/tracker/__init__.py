"""
Batch tracking core.

- parser: split pasted text into tracking numbers
- store: single-writer record container for the current batch
- batch: sequential, rate-limited lookup loop and single-record refresh
"""

from postrack.tracker.batch import BatchTracker, CancellationToken
from postrack.tracker.parser import parse_tracking_numbers
from postrack.tracker.store import RecordStore

__all__ = [
    "BatchTracker",
    "CancellationToken",
    "RecordStore",
    "parse_tracking_numbers",
]
