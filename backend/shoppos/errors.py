# Overview: Error taxonomy shared by services and routes.

"""
Every error carries the HTTP status it maps to and an optional details dict.

- ValidationError: malformed or empty request, rejected before any unit of work opens
- NotFoundError: referenced record does not exist
- ConflictError: business rule conflict (insufficient stock, referenced product, duplicate username)
- StorageError: the store failed (connection, commit, timeout); message is generic
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": str(self)}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError, ValueError):
    """400-level input problem."""
    status_code = 400


class NotFoundError(AppError, LookupError):
    """404-level missing record."""
    status_code = 404


class ConflictError(AppError, ValueError):
    """409-level business rule conflict (e.g., insufficient stock)."""
    status_code = 409


class StorageError(AppError):
    """500-level store failure. The unit of work has been rolled back."""
    status_code = 500
