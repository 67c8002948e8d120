"""
Error kinds raised by the Jobly data layer.

None of these are retryable: the caller has to fix its input or the
state it refers to. The HTTP layer maps `status` to a response code.
"""

from typing import Optional


class JoblyError(Exception):
    """Base class for all model errors."""

    status = 500

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class BadRequestError(JoblyError):
    """Raised when the caller supplied unusable input."""

    status = 400


class NotFoundError(JoblyError):
    """Raised when a get/update/remove targets a missing row."""

    status = 404


class DuplicateError(BadRequestError):
    """Raised when create targets a natural key that already exists."""

    pass
