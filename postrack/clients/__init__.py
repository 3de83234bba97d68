"""
Remote tracking service clients.
"""

from postrack.clients.binderbyte import (
    BinderByteClient,
    LookupProtocolError,
    LookupTransportError,
    TrackingLookupError,
)

__all__ = [
    "BinderByteClient",
    "LookupProtocolError",
    "LookupTransportError",
    "TrackingLookupError",
]
