"""Async HTTP transport for the Altinn message feed."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from .auth import CredentialProvider
from .config import AltinnConfig, RetryConfig
from .errors import RemoteError, TransportError
from .hal import parse_message, parse_messages
from .models import MessageDetail, MessageSummary, TenantConfig
from .retry import with_retry

logger = structlog.get_logger()


class FeedTransport:
    """Fetches message lists, message details and attachment bytes.

    Every call has a bounded timeout and is retried per :class:`RetryConfig`.
    A non-2xx answer raises :class:`RemoteError`, a network failure or
    timeout raises :class:`TransportError`.
    """

    def __init__(
        self,
        config: AltinnConfig,
        retry_config: RetryConfig,
        credentials: CredentialProvider,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._retry = with_retry(retry_config)
        self._credentials = credentials
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_seconds),
            transport=self._transport,
        )
        logger.info("feed_transport_started", timeout_seconds=self._config.timeout_seconds)

    async def stop(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("feed_transport_stopped")

    async def __aenter__(self) -> FeedTransport:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def _get_once(self, uri: str, headers: dict[str, str]) -> httpx.Response:
        assert self._client is not None, "Transport not started"
        try:
            response = await self._client.get(uri, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("feed_request_failed", uri=uri, error=str(exc))
            raise TransportError(f"GET {uri} failed: {exc}") from exc

        if not response.is_success:
            logger.error("feed_request_rejected", uri=uri, status_code=response.status_code)
            raise RemoteError(response.status_code, f"GET {uri} returned {response.status_code}")
        return response

    async def _get(self, uri: str, headers: dict[str, str]) -> httpx.Response:
        return await self._retry(self._get_once)(uri, headers)

    async def _get_json(self, uri: str, tenant: TenantConfig) -> tuple[httpx.Response, Any]:
        response = await self._get(uri, self._credentials.headers_for(tenant))
        try:
            return response, response.json()
        except ValueError as exc:
            raise RemoteError(response.status_code, f"GET {uri} returned invalid JSON") from exc

    async def list_messages(self, uri: str, tenant: TenantConfig) -> list[MessageSummary]:
        response, document = await self._get_json(uri, tenant)
        try:
            return parse_messages(document)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise RemoteError(
                response.status_code, f"malformed message list from {uri}: {exc}"
            ) from exc

    async def get_detail(self, uri: str, tenant: TenantConfig) -> MessageDetail:
        response, document = await self._get_json(uri, tenant)
        try:
            return parse_message(document)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise RemoteError(response.status_code, f"malformed message from {uri}: {exc}") from exc

    async def get_bytes(self, uri: str, tenant: TenantConfig) -> bytes:
        response = await self._get(uri, self._credentials.headers_for_download(tenant))
        logger.debug("attachment_fetched", uri=uri, size=len(response.content))
        return response.content
