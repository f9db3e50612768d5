"""Shared test fixtures for the altinn_sync test suite."""

from __future__ import annotations

from datetime import datetime

import httpx
import pytest

from altinn_sync.config import AltinnConfig, RetryConfig
from altinn_sync.errors import RemoteError
from altinn_sync.models import (
    AttachmentRef,
    MessageDetail,
    MessageSummary,
    ServiceClassification,
    TenantConfig,
)
from altinn_sync.store import InMemoryTenantStore


class FakeFeed:
    """In-memory stand-in for :class:`FeedTransport`.

    Messages are registered per classification code; details and bytes per
    href. ``fail`` maps an href (or classification code) to the error raised
    when it is requested. Every call is recorded in ``calls``.
    """

    def __init__(self) -> None:
        self.feeds: dict[str, list[MessageDetail]] = {}
        self.blobs: dict[str, bytes] = {}
        self.fail: dict[str, Exception] = {}
        self.calls: list[tuple[str, str]] = []

    def add_message(
        self,
        classification: ServiceClassification,
        *,
        created: datetime,
        attachments: list[str],
        message_id: str | None = None,
    ) -> MessageDetail:
        message_id = message_id or f"m-{classification.code}-{len(self.feeds.get(classification.code, []))}"
        refs = [
            AttachmentRef(name=name, href=f"https://altinn.test/att/{message_id}/{i}")
            for i, name in enumerate(attachments)
        ]
        detail = MessageDetail(
            message_id=message_id,
            created_date=created,
            subject=f"Dagsoppgjør {message_id}",
            service_owner=classification.owner,
            service_code=classification.code,
            service_edition=classification.edition,
            self_href=f"https://altinn.test/msg/{message_id}",
            attachments=refs,
        )
        self.feeds.setdefault(classification.code, []).append(detail)
        for ref in refs:
            self.blobs[ref.href] = f"content of {ref.name}".encode()
        return detail

    def _raise_if_failing(self, key: str) -> None:
        if key in self.fail:
            raise self.fail[key]

    async def list_messages(self, uri: str, tenant: TenantConfig) -> list[MessageSummary]:
        self.calls.append(("list", uri))
        flt = httpx.URL(uri).params.get("$filter", "")
        selected: list[MessageDetail] = []
        for code, messages in self.feeds.items():
            if not flt or "ServiceCode" not in flt or f"ServiceCode eq '{code}'" in flt:
                self._raise_if_failing(code)
                selected.extend(messages)
        return [MessageSummary(**m.model_dump(exclude={"attachments"})) for m in selected]

    async def get_detail(self, uri: str, tenant: TenantConfig) -> MessageDetail:
        self.calls.append(("detail", uri))
        self._raise_if_failing(uri)
        for messages in self.feeds.values():
            for message in messages:
                if message.self_href == uri:
                    return message
        raise RemoteError(404, f"GET {uri} returned 404")

    async def get_bytes(self, uri: str, tenant: TenantConfig) -> bytes:
        self.calls.append(("bytes", uri))
        self._raise_if_failing(uri)
        return self.blobs[uri]


@pytest.fixture
def tenant_factory(tmp_path):
    """Factory to create TenantConfig instances with a private storage dir."""

    def _make(org_id: str = "910021451", **overrides) -> TenantConfig:
        storage = tmp_path / org_id
        storage.mkdir(exist_ok=True)
        defaults = dict(
            org_id=org_id,
            host="altinn.test",
            storage_path=str(storage),
            credential_ref="default",
            watermark_date=20240101,
            watermark_time=80000,
        )
        defaults.update(overrides)
        return TenantConfig(**defaults)

    return _make


@pytest.fixture
def tenant(tenant_factory) -> TenantConfig:
    return tenant_factory()


@pytest.fixture
def store(tenant: TenantConfig) -> InMemoryTenantStore:
    return InMemoryTenantStore([tenant])


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def retry_config() -> RetryConfig:
    return RetryConfig(
        max_attempts=2,
        initial_wait_seconds=0.01,
        max_wait_seconds=0.1,
        multiplier=2.0,
    )


@pytest.fixture
def altinn_config() -> AltinnConfig:
    return AltinnConfig(
        timeout_seconds=5.0,
        api_keys={"default": "test-key", "other": "other-key"},
    )
