"""
postrack data models.

This package contains the Pydantic models for tracking lookups and batches.
"""

from postrack.models.tracking import (
    BatchSnapshot,
    BatchStatus,
    BatchSummary,
    CancelBatchResponse,
    RecordState,
    SubmitBatchRequest,
    TrackingData,
    TrackingDetail,
    TrackingHistory,
    TrackingRecord,
    TrackingResponse,
    TrackingSummary,
)

__all__ = [
    # Remote payload
    "TrackingData",
    "TrackingDetail",
    "TrackingHistory",
    "TrackingResponse",
    "TrackingSummary",
    # Batch state
    "BatchSnapshot",
    "BatchStatus",
    "BatchSummary",
    "RecordState",
    "TrackingRecord",
    # API models
    "CancelBatchResponse",
    "SubmitBatchRequest",
]
