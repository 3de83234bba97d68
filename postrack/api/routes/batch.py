"""
Batch tracking API routes.

A single batch lives in memory. Submitting replaces it; records are then
looked up one at a time in the background and can be polled, refreshed,
exported or copied as text.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import PlainTextResponse

from postrack.api.dependencies import get_tracker
from postrack.errors import (
    BatchInProgressError,
    MissingCredentialError,
    PostrackError,
    PreconditionError,
    RecordBusyError,
    RecordNotFoundError,
)
from postrack.exporting import (
    XLSX_MEDIA_TYPE,
    export_filename,
    tracking_numbers_text,
    workbook_bytes,
)
from postrack.models.tracking import (
    BatchSnapshot,
    CancelBatchResponse,
    SubmitBatchRequest,
    TrackingRecord,
)
from postrack.tracker.batch import BatchTracker

router = APIRouter()


def _to_http_error(error: PostrackError) -> HTTPException:
    """Map tracker errors to HTTP errors."""
    if isinstance(error, MissingCredentialError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{error}. Set BINDERBYTE_API_KEY in the environment.",
        )
    if isinstance(error, PreconditionError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, RecordNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (BatchInProgressError, RecordBusyError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error)
    )


def _get_record(tracker: BatchTracker, record_id: str) -> TrackingRecord:
    record = tracker.store.get(record_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Record not found: {record_id}",
        )
    return record


@router.post(
    "/batch",
    response_model=BatchSnapshot,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_batch(
    request: SubmitBatchRequest,
    response: Response,
    wait: bool = Query(
        default=False, description="Respond only after every record was looked up"
    ),
    tracker: BatchTracker = Depends(get_tracker),
) -> BatchSnapshot:
    """
    Replace the current batch and start tracking it.

    Args:
        request: Text with tracking numbers separated by commas or newlines
        wait: Block until processing finishes

    Returns:
        Batch snapshot (202 while running, 200 when wait=true)

    Raises:
        400: Blank input, no valid tracking numbers, or missing API key
        409: Another batch is still running
    """
    try:
        await tracker.submit(request.text)
    except PostrackError as e:
        raise _to_http_error(e)

    if wait:
        await tracker.wait()
        response.status_code = status.HTTP_200_OK

    return tracker.snapshot()


@router.get("/batch", response_model=BatchSnapshot)
async def get_batch(tracker: BatchTracker = Depends(get_tracker)) -> BatchSnapshot:
    """Return the current batch with per-record status and counters."""
    return tracker.snapshot()


@router.delete("/batch", response_model=BatchSnapshot)
async def clear_batch(tracker: BatchTracker = Depends(get_tracker)) -> BatchSnapshot:
    """Stop any running batch and drop all records."""
    tracker.clear()
    return tracker.snapshot()


@router.post("/batch/cancel", response_model=CancelBatchResponse)
async def cancel_batch(
    tracker: BatchTracker = Depends(get_tracker),
) -> CancelBatchResponse:
    """
    Stop the running batch before its next record.

    Records not yet attempted stay pending.
    """
    cancelled = tracker.cancel()
    return CancelBatchResponse(cancelled=cancelled, batch=tracker.snapshot())


@router.get("/batch/export")
async def export_batch(tracker: BatchTracker = Depends(get_tracker)) -> Response:
    """Download the current batch as an .xlsx spreadsheet."""
    content = workbook_bytes(tracker.store.records())
    filename = export_filename()
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/batch/tracking-numbers", response_class=PlainTextResponse)
async def copy_all_tracking_numbers(
    tracker: BatchTracker = Depends(get_tracker),
) -> str:
    """All tracking numbers of the batch, newline separated."""
    return tracking_numbers_text(tracker.store.records())


@router.get("/batch/records/{record_id}", response_model=TrackingRecord)
async def get_record(
    record_id: str,
    tracker: BatchTracker = Depends(get_tracker),
) -> TrackingRecord:
    """
    Get one record of the batch.

    Raises:
        404: Record not found
    """
    return _get_record(tracker, record_id)


@router.get(
    "/batch/records/{record_id}/tracking-number",
    response_class=PlainTextResponse,
)
async def copy_tracking_number(
    record_id: str,
    tracker: BatchTracker = Depends(get_tracker),
) -> str:
    """The tracking number of one record as plain text."""
    return _get_record(tracker, record_id).tracking_number


@router.post("/batch/records/{record_id}/refresh", response_model=TrackingRecord)
async def refresh_record(
    record_id: str,
    tracker: BatchTracker = Depends(get_tracker),
) -> TrackingRecord:
    """
    Look up one record again.

    Runs immediately, independent of any batch in progress.

    Raises:
        400: Missing API key
        404: Record not found
        409: Record already has a lookup in flight
    """
    try:
        return await tracker.refresh_one(record_id)
    except PostrackError as e:
        raise _to_http_error(e)
