"""
Sequential batch tracking.

A submitted batch is processed by one background asyncio task that looks
up records strictly in submission order, one at a time, pausing a fixed
delay between lookups. Single records can be refreshed independently.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Protocol

from postrack.clients.binderbyte import BinderByteClient
from postrack.config import Settings
from postrack.errors import (
    BatchInProgressError,
    InvalidInputError,
    MissingCredentialError,
    RecordBusyError,
    RecordNotFoundError,
)
from postrack.models.tracking import (
    BatchSnapshot,
    BatchStatus,
    BatchSummary,
    TrackingRecord,
    TrackingResponse,
)
from postrack.tracker.parser import parse_tracking_numbers
from postrack.tracker.store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to fetch data"


class TrackingClient(Protocol):
    """Anything that can look up a tracking number"""

    @property
    def has_credential(self) -> bool: ...

    async def track(self, tracking_number: str) -> TrackingResponse: ...


class CancellationToken:
    """Cooperative cancellation flag checked between batch items."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """
        Wait for the given delay, returning early on cancellation.

        Returns:
            True if the token was cancelled before or during the wait
        """
        if self.cancelled:
            return True
        if seconds <= 0:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BatchTracker:
    """
    Owns the current batch and runs its lookups.

    Usage:
        tracker = BatchTracker(client, delay_seconds=1.0, prefix="P")
        await tracker.submit("P123\\nP456")
        await tracker.wait()
        snapshot = tracker.snapshot()
    """

    def __init__(
        self,
        client: TrackingClient,
        delay_seconds: float = 1.0,
        prefix: str = "P",
    ):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

        self.client = client
        self.delay_seconds = delay_seconds
        self.prefix = prefix
        self.store = RecordStore()

        self._task: asyncio.Task | None = None
        self._token: CancellationToken | None = None
        self._is_tracking = False
        self._status = BatchStatus.IDLE
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> BatchTracker:
        """Create a tracker backed by BinderByte with the configured pacing."""
        return cls(
            BinderByteClient.from_settings(settings),
            delay_seconds=settings.request_delay_seconds,
            prefix=settings.tracking_number_prefix,
        )

    @property
    def is_tracking(self) -> bool:
        return self._is_tracking

    @property
    def status(self) -> BatchStatus:
        return self._status

    def _require_credential(self) -> None:
        if not self.client.has_credential:
            raise MissingCredentialError()

    async def submit(self, raw_text: str) -> list[TrackingRecord]:
        """
        Replace the batch with the tracking numbers in raw_text and start
        processing them in the background.

        Args:
            raw_text: Tracking numbers separated by commas or newlines

        Returns:
            The new, still pending, records in submission order

        Raises:
            InvalidInputError: Blank text or no token with the required prefix
            MissingCredentialError: No API key configured
            BatchInProgressError: The previous batch is still running
        """
        if not raw_text or not raw_text.strip():
            raise InvalidInputError("Enter at least one tracking number")

        self._require_credential()

        if self._is_tracking:
            raise BatchInProgressError("A batch is already being tracked")

        tracking_numbers = parse_tracking_numbers(raw_text, self.prefix)
        if not tracking_numbers:
            raise InvalidInputError(
                f"No valid tracking numbers (they must start with '{self.prefix}')"
            )

        previous = self._task
        if previous is not None and not previous.done():
            # A cleared batch may still have a lookup in flight
            await previous
            if self._is_tracking:
                raise BatchInProgressError("A batch is already being tracked")

        records = self.store.replace_batch(tracking_numbers)
        token = CancellationToken()

        self._token = token
        self._is_tracking = True
        self._status = BatchStatus.RUNNING
        self._started_at = _now()
        self._finished_at = None

        logger.info(
            "Batch %s submitted with %d tracking numbers",
            self.store.batch_id,
            len(records),
        )

        self._task = asyncio.create_task(
            self._run([record.id for record in records], token)
        )
        return records

    async def _run(self, record_ids: list[str], token: CancellationToken) -> None:
        """Process records strictly in order, one lookup at a time."""
        attempted = 0
        try:
            for index, record_id in enumerate(record_ids):
                if token.cancelled:
                    break

                record = self.store.get(record_id)
                if record is None:
                    break

                await self._lookup(record.id, record.tracking_number)
                attempted += 1

                if index < len(record_ids) - 1:
                    if await token.sleep(self.delay_seconds):
                        break
        finally:
            # A cleared or replaced batch owns the state now
            if self._token is token:
                self._is_tracking = False
                self._finished_at = _now()
                self._status = (
                    BatchStatus.COMPLETED
                    if attempted == len(record_ids)
                    else BatchStatus.CANCELLED
                )
                logger.info(
                    "Batch %s %s after %d of %d lookups",
                    self.store.batch_id,
                    self._status.value,
                    attempted,
                    len(record_ids),
                )

    async def _lookup(self, record_id: str, tracking_number: str) -> None:
        """Run one lookup and fold its outcome into the record."""
        self.store.update(record_id, loading=True, error=None)

        try:
            response = await self.client.track(tracking_number)
        except Exception as e:
            message = str(e) or DEFAULT_ERROR_MESSAGE
            logger.warning(
                "Tracking lookup failed for %s: %s",
                tracking_number,
                message,
                extra={
                    "json_fields": {
                        "record_id": record_id,
                        "tracking_number": tracking_number,
                        "error_type": type(e).__name__,
                    }
                },
            )
            self.store.update(
                record_id,
                data=None,
                loading=False,
                error=message,
                last_updated=_now(),
            )
            return

        self.store.update(
            record_id,
            data=response,
            loading=False,
            error=None,
            last_updated=_now(),
        )

    async def refresh_one(self, record_id: str) -> TrackingRecord:
        """
        Look up a single record again, without any delay.

        Does not touch the batch-in-progress flag. A refresh that overlaps
        the batch loop's own lookup of the same record is not serialized:
        whichever finishes last wins.

        Raises:
            MissingCredentialError: No API key configured
            RecordNotFoundError: No record with this id
            RecordBusyError: The record already has a lookup in flight
        """
        self._require_credential()

        record = self.store.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Record not found: {record_id}")
        if record.loading:
            raise RecordBusyError(f"Record is already being tracked: {record_id}")

        await self._lookup(record.id, record.tracking_number)

        updated = self.store.get(record_id)
        if updated is None:
            raise RecordNotFoundError(
                f"Record was removed while refreshing: {record_id}"
            )
        return updated

    def cancel(self) -> bool:
        """
        Ask the running batch to stop before its next record.

        Returns:
            True if a running batch was signalled
        """
        if not self._is_tracking or self._token is None:
            return False
        if not self._token.cancelled:
            logger.info("Cancelling batch %s", self.store.batch_id)
        self._token.cancel()
        return True

    def clear(self) -> None:
        """
        Stop any running batch and drop every record.

        A lookup already in flight finishes in the background and its
        result is dropped. The task handle is kept so the next submit and
        shutdown can wait for it.
        """
        if self._token is not None:
            self._token.cancel()
        self._token = None
        self._is_tracking = False
        self._status = BatchStatus.IDLE
        self._started_at = None
        self._finished_at = None
        self.store.clear()

    async def wait(self) -> None:
        """Wait until the running batch, if any, finishes."""
        task = self._task
        if task is None or task.done():
            return
        await asyncio.shield(task)

    async def shutdown(self) -> None:
        """Cancel and drain the running batch."""
        task = self._task
        self.cancel()
        if task is not None and not task.done():
            await task

    def snapshot(self) -> BatchSnapshot:
        records = self.store.records()
        return BatchSnapshot(
            batch_id=self.store.batch_id,
            status=self._status,
            is_tracking=self._is_tracking,
            records=records,
            summary=BatchSummary.from_records(records),
            started_at=self._started_at,
            finished_at=self._finished_at,
        )
