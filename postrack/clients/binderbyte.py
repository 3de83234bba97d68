"""
BinderByte tracking API client.

One GET request per tracking number. Uses curl_cffi with browser
impersonation, the same way policy pages are fetched elsewhere.
"""

import logging
from typing import Any

from curl_cffi import CurlError
from curl_cffi import requests
from pydantic import ValidationError

from postrack.config import Settings
from postrack.errors import MissingCredentialError
from postrack.models.tracking import TrackingResponse

logger = logging.getLogger(__name__)

TRACK_PATH = "/v1/track"

# Status codes the service uses for a successful lookup
SUCCESS_STATUSES = frozenset({200, 201})

DEFAULT_FAILURE_MESSAGE = "Failed to fetch tracking data"


class TrackingLookupError(Exception):
    """A single tracking lookup failed"""


class LookupTransportError(TrackingLookupError):
    """Response could not be retrieved (network, timeout, HTTP status)"""


class LookupProtocolError(TrackingLookupError):
    """Response was retrieved but reports a failure or is malformed"""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class BinderByteClient:
    """
    Async client for the BinderByte /v1/track endpoint.

    Usage:
        client = BinderByteClient(api_key="...", courier="pos")
        response = await client.track("P2511100134523")
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.binderbyte.com",
        courier: str = "pos",
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.courier = courier
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "BinderByteClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            courier=settings.courier,
            timeout=settings.timeout_seconds,
        )

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    @property
    def track_url(self) -> str:
        return f"{self.base_url}{TRACK_PATH}"

    async def track(self, tracking_number: str) -> TrackingResponse:
        """
        Look up one tracking number.

        Args:
            tracking_number: Courier tracking number (awb)

        Returns:
            Parsed response with status 200 or 201

        Raises:
            MissingCredentialError: No API key configured
            LookupTransportError: Network failure, timeout or non-2xx HTTP status
            LookupProtocolError: Body is malformed or reports a failure status
        """
        if not self.has_credential:
            raise MissingCredentialError()

        params = {
            "api_key": self.api_key,
            "courier": self.courier,
            "awb": tracking_number,
        }

        try:
            async with requests.AsyncSession() as session:
                response = await session.get(
                    self.track_url,
                    params=params,
                    timeout=self.timeout,
                    impersonate="chrome",
                )
        except CurlError as e:
            raise LookupTransportError(f"Request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise LookupTransportError(f"HTTP error! status: {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise LookupProtocolError("Response is not valid JSON") from e

        return parse_track_response(body)


def parse_track_response(body: Any) -> TrackingResponse:
    """
    Validate a decoded /v1/track body.

    Raises:
        LookupProtocolError: Body is not an object, lacks a usable status,
            or its status is not a success status
    """
    if not isinstance(body, dict):
        raise LookupProtocolError("Unexpected response shape")

    status = body.get("status")
    if status not in SUCCESS_STATUSES:
        message = body.get("message") or DEFAULT_FAILURE_MESSAGE
        raise LookupProtocolError(
            str(message), status=status if isinstance(status, int) else None
        )

    try:
        return TrackingResponse.model_validate(body)
    except ValidationError as e:
        logger.warning(
            "Malformed tracking response",
            extra={"json_fields": {"errors": e.errors(include_url=False)}},
        )
        raise LookupProtocolError("Malformed tracking response", status=status) from e
