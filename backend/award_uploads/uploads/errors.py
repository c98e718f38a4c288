"""Exceptions raised by the upload pipeline.

Only the router turns these into HTTP responses; every other layer lets
them propagate unchanged.
"""
from typing import Optional


class UploadError(Exception):
    """Base exception for award image upload errors."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PersistenceError(UploadError):
    """Raised when a staged file could not be persisted locally or remotely."""
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message, status_code=500)


class StagingCleanupError(UploadError):
    """Raised when the staged file survives a successful persist (strict mode only)."""
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message, status_code=500)


class UploadTooLargeError(UploadError):
    """Raised when an incoming file exceeds the configured size limit."""
    def __init__(self, size_limit: int):
        self.size_limit = size_limit
        super().__init__(
            f"File size exceeds limit of {size_limit} bytes",
            status_code=413,
        )


class StagingError(UploadError):
    """Raised when an incoming file could not be written to staging."""
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message, status_code=500)
