"""
Exceptions raised by the batch tracker.

Precondition errors are raised before any record is created or mutated.
Per-record lookup failures live in postrack.clients.binderbyte and are
absorbed into record state, never raised out of the batch loop.
"""


class PostrackError(Exception):
    """Base class for postrack errors"""


class PreconditionError(PostrackError):
    """Request rejected before touching batch state"""


class MissingCredentialError(PreconditionError):
    """BinderByte API key is not configured"""

    def __init__(self, message: str = "BinderByte API key is not configured"):
        super().__init__(message)


class InvalidInputError(PreconditionError):
    """Submitted text holds no usable tracking numbers"""


class BatchInProgressError(PostrackError):
    """A batch is still being processed"""


class RecordNotFoundError(PostrackError):
    """No record with the given id in the current batch"""


class RecordBusyError(PostrackError):
    """The record already has a lookup in flight"""
