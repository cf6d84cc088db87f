"""
API error taxonomy.

Every error is rendered to the client as ``{"error": <kind>, "message": <text>}``.
"""
from typing import Optional


class ApiError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class ValidationError(ApiError):
    """Missing or invalid field in a request body."""
    status_code = 400
    error = "Validation error"


class UnauthorizedError(ApiError):
    """Missing, invalid or expired bearer token, or bad credentials."""
    status_code = 401
    error = "Unauthorized"


class NotFoundError(ApiError):
    """Unknown record identifier."""
    status_code = 404
    error = "Not found"


class StorageError(ApiError):
    """Collection read/write failure. Details stay in the server log."""
    status_code = 500
    error = "Internal server error"
