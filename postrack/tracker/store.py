"""
In-memory record store for the current batch.

All mutations happen on the event loop thread, so the store is the single
writer for batch state. Records are keyed by their generated id, never by
tracking number, so duplicate tracking numbers stay independent.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from postrack.models.tracking import TrackingRecord


class RecordStore:
    """
    Ordered collection of TrackingRecord keyed by record id.

    Updates replace the stored record with a modified copy; callers only
    ever see immutable snapshots.
    """

    def __init__(self):
        self._records: dict[str, TrackingRecord] = {}
        self._batch_id: str | None = None

    @property
    def batch_id(self) -> str | None:
        return self._batch_id

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._records

    def records(self) -> list[TrackingRecord]:
        """Records in submission order."""
        return list(self._records.values())

    def replace_batch(self, tracking_numbers: list[str]) -> list[TrackingRecord]:
        """
        Drop the current batch and create one pending record per number.

        Args:
            tracking_numbers: Tracking numbers in submission order

        Returns:
            The new records, in the same order
        """
        self._batch_id = str(uuid4())
        self._records = {}
        for tracking_number in tracking_numbers:
            record = TrackingRecord(id=str(uuid4()), tracking_number=tracking_number)
            self._records[record.id] = record
        return self.records()

    def get(self, record_id: str) -> TrackingRecord | None:
        return self._records.get(record_id)

    def update(self, record_id: str, **fields: Any) -> TrackingRecord | None:
        """
        Replace a record with an updated copy.

        Unknown ids are ignored so results that arrive after the batch was
        replaced or cleared are dropped.

        Args:
            record_id: Record to update
            **fields: TrackingRecord fields to change

        Returns:
            The updated record, or None if the id is not in the batch

        Raises:
            ValueError: On an attempt to change the record identity, or if
                the update would leave both data and error set
        """
        current = self._records.get(record_id)
        if current is None:
            return None

        if "id" in fields or "tracking_number" in fields:
            raise ValueError("record identity cannot be changed")

        updated = current.model_copy(update=fields)
        if updated.data is not None and updated.error is not None:
            raise ValueError("a record cannot hold both data and an error")

        self._records[record_id] = updated
        return updated

    def clear(self) -> None:
        self._records = {}
        self._batch_id = None
