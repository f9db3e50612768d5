"""SyncEngine — one tenant's incremental sync, start to finish.

A single pass per tenant, no internal retries beyond the per-call policy of
the transport::

    NotDue                     watermark already at today -> no remote calls
    Querying -> Resolving -> Downloading -> Completed
                     any SyncError -> Failed      cancel event -> Cancelled

The watermark is written only in ``Completed`` and only when the feed
returned at least one message, so a day with no documents is retried on the
next trigger.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Protocol

import structlog

from . import watermark
from .downloader import FileDownloader
from .errors import RemoteError, SyncError
from .feed import MessageSource, list_merged
from .models import (
    MessageDetail,
    OutcomeStatus,
    SyncResultEntry,
    TenantConfig,
    TenantOutcome,
)
from .naming import attachment_filename
from .resolver import AttachmentResolver, DetailSource
from .store import TenantStore

logger = structlog.get_logger()


class FeedSource(MessageSource, DetailSource, Protocol):
    async def get_bytes(self, uri: str, tenant: TenantConfig) -> bytes: ...


class SyncCancelled(Exception):
    """Raised inside a tenant run when the run-scoped cancel event is set."""


class SyncEngine:
    """Orchestrates watermark, feed merge, resolution and download for one tenant.

    Collaborators are passed in explicitly; the engine owns no connections.
    """

    def __init__(
        self,
        source: FeedSource,
        store: TenantStore,
        downloader: FileDownloader | None = None,
        *,
        scheme: str = "https",
    ) -> None:
        self._source = source
        self._store = store
        self._resolver = AttachmentResolver(source)
        self._downloader = downloader or FileDownloader()
        self._scheme = scheme

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def sync_tenant(
        self,
        tenant: TenantConfig,
        *,
        now: datetime | None = None,
        force_all: bool = False,
        since: datetime | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> TenantOutcome:
        """Run one tenant and return its outcome. Never raises a :class:`SyncError`.

        ``force_all`` drops the creation-time filter and ``since`` replaces
        the watermark as the filter; either bypasses the once-a-day check.
        """
        now = now or datetime.now()
        cancel_event = cancel_event or asyncio.Event()

        with structlog.contextvars.bound_contextvars(org_id=tenant.org_id):
            try:
                return await self._run(tenant, now, force_all, since, cancel_event)
            except SyncCancelled:
                logger.warning("tenant_sync_cancelled")
                return TenantOutcome(org_id=tenant.org_id, status=OutcomeStatus.CANCELLED)
            except SyncError as exc:
                logger.error("tenant_sync_failed", error_kind=exc.kind, error=exc.detail)
                return TenantOutcome(
                    org_id=tenant.org_id,
                    status=OutcomeStatus.FAILED,
                    error_kind=exc.kind,
                    error_detail=exc.detail,
                    status_code=exc.status_code if isinstance(exc, RemoteError) else None,
                )

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    async def _run(
        self,
        tenant: TenantConfig,
        now: datetime,
        force_all: bool,
        since: datetime | None,
        cancel_event: asyncio.Event,
    ) -> TenantOutcome:
        override = force_all or since is not None
        if not override and not watermark.is_sync_needed(tenant, now):
            logger.info("tenant_already_synced_today", watermark_date=tenant.watermark_date)
            return TenantOutcome(org_id=tenant.org_id, status=OutcomeStatus.NOT_DUE)

        # Querying
        if since is not None:
            query_since: datetime | None = since
        elif force_all:
            query_since = None
        else:
            query_since = watermark.since_timestamp(tenant)
        logger.info(
            "tenant_sync_started",
            force_all=force_all,
            since=query_since.isoformat() if query_since else None,
        )
        summaries = await list_merged(self._source, tenant, query_since, scheme=self._scheme)

        entries: list[SyncResultEntry] = []
        for summary in summaries:
            self._check_cancelled(cancel_event)
            # Resolving
            detail = await self._resolver.resolve(tenant, summary)
            # Downloading
            entries.extend(await self._download_attachments(tenant, detail, now, cancel_event))

        # Completed
        if summaries:
            self._check_cancelled(cancel_event)
            await watermark.advance(tenant, now, self._store)

        logger.info(
            "tenant_sync_completed",
            messages=len(summaries),
            attachments=len(entries),
        )
        return TenantOutcome(
            org_id=tenant.org_id,
            status=OutcomeStatus.COMPLETED,
            messages=len(summaries),
            entries=entries,
        )

    async def _download_attachments(
        self,
        tenant: TenantConfig,
        detail: MessageDetail,
        run_at: datetime,
        cancel_event: asyncio.Event,
    ) -> list[SyncResultEntry]:
        entries: list[SyncResultEntry] = []
        for ref in detail.attachments:
            self._check_cancelled(cancel_event)
            filename = attachment_filename(detail.created_date, ref.name)
            data = await self._source.get_bytes(ref.href, tenant)
            await self._downloader.save(tenant.storage_path, filename, data)
            entries.append(
                SyncResultEntry(
                    org_id=tenant.org_id,
                    run_at=run_at,
                    created_date=detail.created_date,
                    filename=filename,
                    service_owner=detail.service_owner,
                )
            )
        return entries

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event) -> None:
        if cancel_event.is_set():
            raise SyncCancelled()
