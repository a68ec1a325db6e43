"""Error types and HTTP status mapping."""

from __future__ import annotations

from collections.abc import Mapping


def extract_message(payload: object) -> str | None:
    if not isinstance(payload, Mapping):
        return None
    for key in ("message", "error"):
        value = payload.get(key)
        if value is not None and str(value).strip():
            return str(value)
    return None


class MafiaApiError(Exception):
    """Base exception for this package."""

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        cause: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.cause = cause


class MafiaTransportError(MafiaApiError):
    """Network/transport-level failure."""


class MafiaTimeoutError(MafiaTransportError):
    """Server did not answer within the configured timeout."""


class MafiaClientClosedError(MafiaApiError):
    """Raised when client is used after close."""


class MafiaValidationError(MafiaApiError):
    """Invalid input / request rejected."""


class MafiaUnauthorizedError(MafiaApiError):
    """Session missing or expired."""


class MafiaForbiddenError(MafiaApiError):
    """Resource belongs to another player, or the player is jailed."""


class MafiaNotFoundError(MafiaApiError):
    """Requested resource does not exist."""


class MafiaServerError(MafiaApiError):
    """Server-side unexpected error."""


class MafiaProtocolError(MafiaApiError):
    """Response body could not be understood."""


def classify_http_error(
    payload: object,
    *,
    http_status: int | None,
) -> MafiaApiError | None:
    """Map a non-2xx response to a domain exception; None on success."""

    if http_status is not None and 200 <= http_status < 300:
        return None

    message = extract_message(payload) or "An error occurred"
    if http_status is None:
        return MafiaProtocolError("Missing HTTP status")
    if http_status == 401:
        return MafiaUnauthorizedError("UNAUTHORIZED", http_status=http_status)
    if http_status == 403:
        return MafiaForbiddenError(message, http_status=http_status)
    if http_status == 404:
        return MafiaNotFoundError(message, http_status=http_status)
    if http_status >= 500:
        return MafiaServerError(message, http_status=http_status)
    if http_status >= 400:
        return MafiaValidationError(message, http_status=http_status)
    return MafiaProtocolError(
        f"Unexpected HTTP status {http_status}",
        http_status=http_status,
    )


__all__ = [
    "MafiaApiError",
    "MafiaTransportError",
    "MafiaTimeoutError",
    "MafiaClientClosedError",
    "MafiaValidationError",
    "MafiaUnauthorizedError",
    "MafiaForbiddenError",
    "MafiaNotFoundError",
    "MafiaServerError",
    "MafiaProtocolError",
    "extract_message",
    "classify_http_error",
]
