"""Typed failures raised by the backend adapters.

The function API reports problems two ways: a non-2xx HTTP status, or a 200
response whose body has ``status: error``. Both carry a loosely shaped JSON
body; ``ErrorBody`` reads the message, code and hint out of it once so the
adapter and the error mapping agree on what the backend said.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

MESSAGE_KEYS = ("errorMessage", "message", "detail", "error")
CODE_KEYS = ("code", "errorCode")
HINT_KEYS = ("hint", "errorData", "details")
SNIPPET_LIMIT = 400


class ApiError(RuntimeError):
    """Base class for backend adapter failures.

    ``context`` names the backend function (``module:function``) or the
    record kind the failure belongs to.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx: bad arguments, missing record, or not signed in."""


class ApiServerError(ApiError):
    """HTTP 5xx from the function API."""


class ApiTimeoutError(ApiError):
    """No response: timeout or connection failure after all attempts."""


class BackendFunctionError(ApiError):
    """The function ran and answered ``status: error`` over HTTP 200."""

    def __init__(
        self,
        message: str,
        *,
        function_path: str,
        payload: Any = None,
        data: Any = None,
    ) -> None:
        super().__init__(message, payload=payload, context=function_path)
        self.function_path = function_path
        self.data = data


def _message_in(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        for key in MESSAGE_KEYS:
            found = _message_in(value.get(key))
            if found:
                return found
    if isinstance(value, list):
        for item in value:
            found = _message_in(item)
            if found:
                return found
    return None


def _short_text(value: Any, limit: int = 200) -> Optional[str]:
    """Single-line rendering of hint data such as ``{"field": "zipCode"}``."""
    if value is None:
        return None
    if isinstance(value, dict):
        text = ", ".join(
            f"{key}={part}"
            for key, part in ((k, _short_text(v, limit)) for k, v in list(value.items())[:4])
            if part
        )
    elif isinstance(value, list):
        text = "; ".join(part for part in (_short_text(v, limit) for v in value[:3]) if part)
    else:
        text = str(value).strip()
    return text[:limit] or None


@dataclass(frozen=True)
class ErrorBody:
    """What an error response says, whatever its exact shape."""

    message: Optional[str] = None
    code: Optional[str] = None
    hint: Optional[str] = None
    raw: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ErrorBody":
        if isinstance(payload, str):
            text = payload.strip()[:SNIPPET_LIMIT] or None
            return cls(message=text, hint=text, raw=payload)
        if not isinstance(payload, dict):
            return cls(message=_message_in(payload), raw=payload)
        code = next((str(payload[k]) for k in CODE_KEYS if payload.get(k) is not None), None)
        hint = next(
            (text for text in (_short_text(payload[k]) for k in HINT_KEYS if k in payload) if text),
            None,
        )
        return cls(message=_message_in(payload), code=code, hint=hint, raw=payload)

    @classmethod
    def from_response(cls, resp: Any) -> "ErrorBody":
        """Parse ``resp`` as JSON, falling back to the start of its text body."""
        try:
            payload = resp.json()
        except ValueError:
            payload = (getattr(resp, "text", "") or "")[:SNIPPET_LIMIT] or None
        return cls.from_payload(payload)


def error_for_status(ctx: str, status: int, body: ErrorBody) -> ApiError:
    """Exception for a non-2xx answer to the call named ``ctx``."""
    summary = f"{ctx}: {body.message} (HTTP {status})" if body.message else f"{ctx}: HTTP {status}"
    if 400 <= status < 500:
        return ApiClientError(
            summary, status=status, code=body.code, hint=body.hint, payload=body.raw, context=ctx
        )
    if 500 <= status < 600:
        return ApiServerError(summary, status=status, payload=body.raw, context=ctx)
    return ApiError(summary, status=status, payload=body.raw, context=ctx)


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiServerError",
    "ApiTimeoutError",
    "BackendFunctionError",
    "ErrorBody",
    "error_for_status",
]
