"""
Dependencies for API routes.
"""

from fastapi import HTTPException, Request, status

from postrack.tracker.batch import BatchTracker


def get_tracker(request: Request) -> BatchTracker:
    """
    Return the process-wide batch tracker created at startup.

    Raises:
        HTTPException: 503 if the tracker has not been initialized
    """
    tracker = getattr(request.app.state, "tracker", None)
    if tracker is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tracker not available",
        )
    return tracker
