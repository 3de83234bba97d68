"""
pytest configuration and fixtures.

Loads environment variables from .env file for all tests and provides a
scripted tracking client so no test reaches the real BinderByte API.
"""

import asyncio
from pathlib import Path
from typing import Callable

import pytest
from dotenv import load_dotenv

from postrack.models.tracking import TrackingResponse


def pytest_configure(config):
    """Load .env file before running tests"""
    project_root = Path(__file__).parent.parent
    env_file = project_root / ".env"

    if env_file.exists():
        print(f"Loading environment from {env_file}")
        load_dotenv(env_file)


def build_response(
    tracking_number: str,
    status: int = 200,
    message: str = "Successfully tracked package",
    summary_status: str = "ON PROCESS",
    history: list[dict] | None = None,
) -> TrackingResponse:
    """Build a BinderByte-shaped response."""
    if history is None:
        history = [
            {
                "date": "2025-11-12 14:03:00",
                "desc": f"{tracking_number} arrived at sorting center",
                "location": "BANDUNG",
            },
            {
                "date": "2025-11-10 09:12:00",
                "desc": "Shipment received at counter",
                "location": "JAKARTA",
            },
        ]
    return TrackingResponse.model_validate(
        {
            "status": status,
            "message": message,
            "data": {
                "summary": {
                    "awb": tracking_number,
                    "courier": "POS Indonesia",
                    "service": "PKH",
                    "status": summary_status,
                    "date": "2025-11-10 09:12:00",
                    "desc": "",
                    "amount": "0",
                    "weight": "1",
                },
                "detail": {
                    "origin": "JAKARTA",
                    "destination": "BANDUNG",
                    "shipper": "TOKO ABC",
                    "receiver": "BUDI",
                },
                "history": history,
            },
        }
    )


class FakeTrackingClient:
    """
    Scripted stand-in for BinderByteClient.

    outcomes maps a tracking number to a TrackingResponse, an exception,
    or a list of those consumed one per call. Unlisted numbers are found.
    """

    def __init__(
        self,
        outcomes: dict | None = None,
        has_credential: bool = True,
        latency: float = 0.0,
    ):
        self.outcomes = outcomes or {}
        self.has_credential = has_credential
        self.latency = latency
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def track(self, tracking_number: str) -> TrackingResponse:
        self.calls.append(tracking_number)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.latency:
                await asyncio.sleep(self.latency)
            else:
                await asyncio.sleep(0)

            outcome = self.outcomes.get(tracking_number)
            if isinstance(outcome, list):
                outcome = outcome.pop(0)
            if outcome is None:
                outcome = build_response(tracking_number)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1


@pytest.fixture
def make_response() -> Callable[..., TrackingResponse]:
    """Factory for BinderByte-shaped responses."""
    return build_response


@pytest.fixture
def fake_client_factory() -> Callable[..., FakeTrackingClient]:
    """Factory for scripted tracking clients."""
    return FakeTrackingClient


@pytest.fixture
def fake_client() -> FakeTrackingClient:
    """Tracking client that finds every number immediately."""
    return FakeTrackingClient()
