"""
Error types shared by services and routes.

Services raise these; the API layer turns them into `{"error", "details"}`
JSON bodies through a single exception handler registered in main.py.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_INTERNAL_ERROR = 500

MSG_MAPS_KEY_MISSING = "Google Maps API key is not configured"


class ShopDiscoveryError(Exception):
    """Base class for all application errors."""


class ApiError(ShopDiscoveryError):
    """An error that maps directly onto an HTTP response."""

    status_code: int = STATUS_INTERNAL_ERROR

    def __init__(self, message: str, status_code: int | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class BadRequestError(ApiError):
    status_code = STATUS_BAD_REQUEST


class AuthenticationRequired(ApiError):
    status_code = STATUS_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ShopNotFoundError(ApiError):
    status_code = STATUS_NOT_FOUND

    def __init__(self, shop_id: str) -> None:
        super().__init__(f"Shop not found: {shop_id}")
        self.shop_id = shop_id


class ShopPermissionError(ApiError):
    status_code = STATUS_FORBIDDEN


class ShopConflictError(ApiError):
    status_code = STATUS_CONFLICT


class NotFoundError(ApiError):
    """Lookup produced no result (geocode, nearby station)."""

    status_code = STATUS_NOT_FOUND


class MapsNotConfigured(ApiError):
    def __init__(self) -> None:
        super().__init__(MSG_MAPS_KEY_MISSING, STATUS_INTERNAL_ERROR)


class GoogleMapsError(ApiError):
    """Upstream failure from Google Maps Platform.

    `status_code` is the upstream HTTP status (or 500 when unknown) so direct
    endpoints can pass it through unchanged.
    """


class GoogleMapsTimeout(GoogleMapsError):
    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(f"{operation} timed out after {timeout}s", STATUS_INTERNAL_ERROR)
        self.operation = operation


class PlaceDetailsError(GoogleMapsError):
    """Places API answered with an `error` object in the payload."""


class StorageError(ApiError):
    """Object storage upload failed."""


def error_body(message: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return body


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError as `{"error": ..., "details": ...}`."""
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))
