"""
Exceptions raised by the DataSet client.
"""

from __future__ import annotations

from typing import Optional


class DataSetError(Exception):
    """Base exception for all DataSet client errors."""

    def __init__(self, message: str, phase: Optional[str] = None):
        self.phase = phase
        super().__init__(message)


class RequestEncodeError(DataSetError):
    """Raised when a request cannot be serialised to JSON."""

    def __init__(self, message: str):
        super().__init__(f"Could not encode request: {message}", phase="submit")


class DataSetTransportError(DataSetError):
    """Raised when a call to DataSet fails at the network level."""

    def __init__(self, phase: str, message: str):
        super().__init__(f"Request to DataSet failed during {phase}: {message}", phase=phase)


class DataSetTimeoutError(DataSetTransportError):
    """Raised when a call to DataSet times out."""

    def __init__(self, phase: str, message: str = "timed out"):
        super().__init__(phase, message)


class DataSetStatusError(DataSetError):
    """Raised when DataSet answers a submit or poll with a non-2xx status."""

    def __init__(self, phase: str, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"DataSet returned {status_code} during {phase}: {message}", phase=phase)


class ResponseDecodeError(DataSetError):
    """Raised when a DataSet response is not a valid query result."""

    def __init__(self, phase: str, message: str):
        super().__init__(f"Could not decode DataSet response during {phase}: {message}", phase=phase)


class QueryDeadlineExceeded(DataSetError):
    """Raised when a query does not complete within the caller's deadline."""

    def __init__(self, deadline: float, query_id: Optional[str] = None):
        self.deadline = deadline
        self.query_id = query_id
        super().__init__(f"Query did not complete within {deadline:g}s", phase="poll")
