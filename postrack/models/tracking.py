from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# BinderByte reports a found shipment with status 200
STATUS_FOUND = 200


def _as_text(value: Any) -> Any:
    """Normalize null/numeric API values to strings."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# Courier fields are free text; the API sometimes sends null or numbers
Text = Annotated[str, BeforeValidator(_as_text)]


class RecordState(StrEnum):
    """Display state of a tracking record"""

    PENDING = "pending"  # Not looked up yet
    LOADING = "loading"  # Lookup in flight
    FOUND = "found"  # Service returned shipment data
    NOT_FOUND = "not_found"  # Service answered without a 200 status
    ERROR = "error"  # Lookup failed


class BatchStatus(StrEnum):
    """Lifecycle of the current batch"""

    IDLE = "idle"  # No batch submitted
    RUNNING = "running"  # Sequential processing in progress
    COMPLETED = "completed"  # Every record was attempted
    CANCELLED = "cancelled"  # Stopped before the last record


class TrackingHistory(BaseModel):
    """Single entry of a shipment's history"""

    date: Text = Field(default="", description="Event date as reported")
    desc: Text = Field(default="", description="Event description")
    location: Text = Field(default="", description="Event location")


class TrackingSummary(BaseModel):
    """Shipment summary block"""

    awb: Text = Field(default="", description="Air waybill / tracking number")
    courier: Text = Field(default="", description="Courier name")
    service: Text = Field(default="", description="Service level")
    status: Text = Field(default="", description="Carrier status, e.g. DELIVERED")
    date: Text = Field(default="", description="Shipment date")
    desc: Text = Field(default="", description="Summary description")
    amount: Text = Field(default="", description="Declared amount")
    weight: Text = Field(default="", description="Parcel weight")


class TrackingDetail(BaseModel):
    """Origin, destination and parties"""

    origin: Text = Field(default="", description="Origin city")
    destination: Text = Field(default="", description="Destination city")
    shipper: Text = Field(default="", description="Shipper name")
    receiver: Text = Field(default="", description="Receiver name")


class TrackingData(BaseModel):
    """Shipment data returned by the tracking service"""

    summary: TrackingSummary = Field(default_factory=TrackingSummary)
    detail: TrackingDetail = Field(default_factory=TrackingDetail)
    history: list[TrackingHistory] = Field(
        default_factory=list, description="History events, most recent first"
    )

    @field_validator("summary", "detail", "history", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info) -> Any:
        if value is None:
            return [] if info.field_name == "history" else {}
        return value


class TrackingResponse(BaseModel):
    """Full response body of a tracking lookup"""

    status: int = Field(description="Status code embedded in the response body")
    message: Text = Field(default="", description="Service message")
    data: Optional[TrackingData] = Field(default=None, description="Shipment data")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": 200,
                "message": "Successfully tracked package",
                "data": {
                    "summary": {
                        "awb": "P2511100134523",
                        "courier": "POS Indonesia",
                        "service": "Pos Kilat Khusus",
                        "status": "DELIVERED",
                        "date": "2025-11-10 09:12:00",
                        "weight": "1",
                    },
                    "detail": {
                        "origin": "JAKARTA",
                        "destination": "BANDUNG",
                        "shipper": "TOKO ABC",
                        "receiver": "BUDI",
                    },
                    "history": [
                        {
                            "date": "2025-11-12 14:03:00",
                            "desc": "Delivered to BUDI",
                            "location": "BANDUNG",
                        }
                    ],
                },
            }
        }
    )

    @property
    def is_found(self) -> bool:
        return self.status == STATUS_FOUND and self.data is not None


class TrackingRecord(BaseModel):
    """
    One tracked shipment in the current batch.

    The result payload and the error message are mutually exclusive:
    a lookup clears the error before it starts and then fills exactly one.
    """

    id: str = Field(description="Unique record identifier (UUID)")
    tracking_number: str = Field(description="Tracking number as submitted")
    data: Optional[TrackingResponse] = Field(
        default=None, description="Result of the last successful lookup"
    )
    loading: bool = Field(default=False, description="Lookup in flight")
    error: Optional[str] = Field(default=None, description="Last lookup failure")
    last_updated: Optional[datetime] = Field(
        default=None, description="When the last lookup finished"
    )

    @model_validator(mode="after")
    def _check_exclusive(self) -> "TrackingRecord":
        if self.data is not None and self.error is not None:
            raise ValueError("a record cannot hold both data and an error")
        return self

    @computed_field
    @property
    def state(self) -> RecordState:
        if self.loading:
            return RecordState.LOADING
        if self.error is not None:
            return RecordState.ERROR
        if self.data is None:
            return RecordState.PENDING
        if self.data.is_found:
            return RecordState.FOUND
        return RecordState.NOT_FOUND

    @computed_field
    @property
    def latest_history(self) -> Optional[TrackingHistory]:
        if self.data is None or self.data.data is None:
            return None
        history = self.data.data.history
        return history[0] if history else None


class BatchSummary(BaseModel):
    """Counters shown above the result list"""

    total: int = Field(default=0, description="Records in the batch")
    loading: int = Field(default=0, description="Records with a lookup in flight")
    successful: int = Field(default=0, description="Records found (status 200)")
    failed: int = Field(
        default=0, description="Records with an error or a non-200 status"
    )
    pending: int = Field(default=0, description="Records not looked up yet")

    @classmethod
    def from_records(cls, records: list[TrackingRecord]) -> "BatchSummary":
        summary = cls(total=len(records))
        for record in records:
            state = record.state
            if state == RecordState.LOADING:
                summary.loading += 1
            elif state == RecordState.FOUND:
                summary.successful += 1
            elif state in (RecordState.ERROR, RecordState.NOT_FOUND):
                summary.failed += 1
            else:
                summary.pending += 1
        return summary


class BatchSnapshot(BaseModel):
    """Point-in-time view of the current batch"""

    batch_id: Optional[str] = Field(default=None, description="Current batch id")
    status: BatchStatus = Field(default=BatchStatus.IDLE, description="Batch status")
    is_tracking: bool = Field(
        default=False, description="True while the batch loop is running"
    )
    records: list[TrackingRecord] = Field(
        default_factory=list, description="Records in submission order"
    )
    summary: BatchSummary = Field(default_factory=BatchSummary)
    started_at: Optional[datetime] = Field(default=None)
    finished_at: Optional[datetime] = Field(default=None)


# API Request/Response Models


class SubmitBatchRequest(BaseModel):
    """Request body for submitting tracking numbers."""

    text: str = Field(
        description="Tracking numbers separated by commas or newlines",
        examples=["P2511100134523\nP2511100134524, P2511100134525"],
    )


class CancelBatchResponse(BaseModel):
    """Response for a cancel request."""

    cancelled: bool = Field(description="Whether a running batch was signalled")
    batch: BatchSnapshot = Field(description="Batch state after the request")
