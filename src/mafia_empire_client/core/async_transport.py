"""Async HTTP transport for the game REST API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from ..config import MafiaClientConfig
from .errors import (
    MafiaProtocolError,
    MafiaTimeoutError,
    MafiaTransportError,
    classify_http_error,
)

logger = logging.getLogger("mafia_empire_client")


class AsyncTransportClient(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any | None = None,
    ) -> "JsonPayloadResponse": ...

    async def aclose(self) -> None: ...


class JsonPayloadResponse(Protocol):
    def json(self) -> object: ...


def build_default_headers(config: MafiaClientConfig) -> Mapping[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": config.user_agent,
        "X-Requested-With": "XMLHttpRequest",
    }


class AsyncTransport:
    """Sends one request per call. Retrying is left to the caller."""

    def __init__(
        self,
        config: MafiaClientConfig,
        *,
        client: AsyncTransportClient | None = None,
    ) -> None:
        self._config = config
        self._closed = False
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url.rstrip("/") + "/",
            headers=build_default_headers(config),
            timeout=httpx.Timeout(config.transport.timeout_seconds),
        )

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client and hasattr(self._client, "aclose"):
            await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Mapping[str, Any] | None = None,
    ) -> object:
        if self._closed:
            raise MafiaTransportError("transport is already closed")

        normalized_path = path.lstrip("/")
        logger.debug("request start method=%s path=%s", method, normalized_path)
        try:
            response = await self._client.request(method, normalized_path, json=json)
        except httpx.TimeoutException as exc:
            logger.error("request timed out method=%s path=%s", method, normalized_path)
            raise MafiaTimeoutError(
                "Request timeout - the server took too long to respond",
                cause="timeout",
            ) from exc
        except Exception as exc:
            logger.error(
                "request network error method=%s path=%s error=%s",
                method,
                normalized_path,
                exc.__class__.__name__,
            )
            raise MafiaTransportError(
                "network/transport error",
                cause="network",
            ) from exc

        http_status = getattr(response, "status_code", None)
        payload = parse_json_payload(response, http_status=http_status)
        error = classify_http_error(payload, http_status=http_status)
        if error is not None:
            logger.error(
                "request failed method=%s path=%s http_status=%s",
                method,
                normalized_path,
                http_status,
            )
            raise error

        logger.info("request success method=%s path=%s", method, normalized_path)
        return payload


def parse_json_payload(response: JsonPayloadResponse, *, http_status: int | None) -> object:
    """Decode the body; only successful responses must carry valid JSON."""

    try:
        return response.json()
    except Exception as exc:
        if http_status is not None and 200 <= http_status < 300:
            raise MafiaProtocolError(
                "Invalid response format",
                http_status=http_status,
            ) from exc
        return None


async def request_json_object(
    transport: "AsyncTransport",
    method: str,
    path: str,
    *,
    json: Mapping[str, Any] | None = None,
) -> dict[str, object]:
    payload = await transport.request(method, path, json=json)
    if not isinstance(payload, dict):
        raise MafiaProtocolError(f"{path} must return a JSON object")
    return payload


async def request_json_list(
    transport: "AsyncTransport",
    method: str,
    path: str,
) -> list[dict[str, object]]:
    payload = await transport.request(method, path)
    if not isinstance(payload, list):
        raise MafiaProtocolError(f"{path} must return a JSON array")
    for item in payload:
        if not isinstance(item, dict):
            raise MafiaProtocolError(f"{path} array element must be an object")
    return payload


__all__ = [
    "AsyncTransportClient",
    "AsyncTransport",
    "build_default_headers",
    "parse_json_payload",
    "request_json_object",
    "request_json_list",
]
