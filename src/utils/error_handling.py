"""Custom exceptions and helpers for consistent error responses."""

from typing import Any, Dict

from utils.response import HeaderMode, build_response


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(AppError):
    """Raised when a requested resource is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=400)


class StoreError(AppError):
    """Raised when the backing table cannot serve a request."""

    def __init__(self, message: str = "Store operation failed"):
        super().__init__(message, status_code=500)


class StoreUnavailableError(StoreError):
    """The table endpoint could not be reached or credentials are missing."""


class StoreOperationError(StoreError):
    """The table rejected or failed the operation."""


class ConfigurationError(Exception):
    """Raised at start-up when handler registration is inconsistent."""


class DuplicateRouteError(ConfigurationError):
    """Two operations resolve to the same method and path."""

    def __init__(self, route: str):
        super().__init__(f"Duplicate Route: {route}")
        self.route = route


def to_response(error: AppError) -> Dict[str, Any]:
    """Convert an AppError into a Lambda proxy integration response."""
    return build_response(error.status_code, {"message": str(error)}, HeaderMode.ALLOW)
