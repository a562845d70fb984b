"""Turn adapter failures into the ``UseCaseError`` a screen shows.

Use cases wrap every backend call in ``except BACKEND_FAILURES`` and re-raise
``map_api_error(...)``; view models only ever catch ``UseCaseError``.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple, Type

from kept.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    BackendFunctionError,
    ErrorBody,
)
from kept.domain.ports import UseCaseError

BACKEND_FAILURES: Tuple[Type[BaseException], ...] = (ApiError, RuntimeError)

# 4xx status -> (code, message prefix); the backend hint is appended when present.
CLIENT_STATUS_CODES: Dict[int, Tuple[str, str]] = {
    400: ("INVALID_PARAMS", "Invalid input"),
    404: ("NOT_FOUND", "Not found"),
    422: ("INVALID_PARAMS", "Invalid input"),
}
AUTH_STATUSES = (401, 403)

TIMEOUT_MESSAGE = "Request timed out. Check connection."
AUTH_MESSAGE = "Sign-in expired or not permitted."
SERVER_MESSAGE = "Server error, try again."


def _with_hint(prefix: str, hint: Optional[str]) -> str:
    hint = (hint or "").strip()
    return f"{prefix}: {hint}" if hint else f"{prefix.rstrip('.')}."


def _client_error(exc: ApiClientError) -> UseCaseError:
    status = exc.status or 0
    if status in AUTH_STATUSES:
        return UseCaseError("AUTH_FAILED", AUTH_MESSAGE)
    hint = exc.hint or ErrorBody.from_payload(exc.payload).hint
    code, prefix = CLIENT_STATUS_CODES.get(
        status, ("REQUEST_FAILED", f"Request failed (HTTP {status})" if status else "Request failed")
    )
    return UseCaseError(code, _with_hint(prefix, hint))


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Stable code and user-facing message for ``exc``.

    ``default_code``/``default_message`` apply to failures that are not typed
    adapter errors (malformed responses surface as ``RuntimeError``).
    An existing ``UseCaseError`` is returned unchanged.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", TIMEOUT_MESSAGE)
    if isinstance(exc, BackendFunctionError):
        message = ErrorBody.from_payload(exc.payload).message
        return UseCaseError(
            "BACKEND_ERROR",
            message or default_message or "Request failed.",
            meta={"function": exc.function_path},
        )
    if isinstance(exc, ApiClientError):
        return _client_error(exc)
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", SERVER_MESSAGE)
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))
    return UseCaseError(default_code, default_message or str(exc) or "Unexpected error.")


__all__ = ["BACKEND_FAILURES", "map_api_error"]
