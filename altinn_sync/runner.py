"""SyncRunner — the batch entry point over all tenants.

The runner is the failure-isolation boundary: whatever goes wrong inside
one tenant's run is recorded as that tenant's outcome and the batch moves
on to the next tenant.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

import structlog

from .engine import FeedSource, SyncEngine
from .errors import SyncError
from .feed import list_messages
from .models import (
    MessageLogEntry,
    MessageSummary,
    OutcomeStatus,
    SyncReport,
    TenantConfig,
    TenantOutcome,
)
from .store import TenantStore

logger = structlog.get_logger()


class SyncRunner:
    """Runs :class:`SyncEngine` for every tenant in the store.

    Tenants run sequentially when ``max_parallel_tenants`` is 1, otherwise
    concurrently up to that bound; outcomes are always reported in store order.
    """

    def __init__(
        self,
        store: TenantStore,
        engine: SyncEngine,
        source: FeedSource,
        *,
        max_parallel_tenants: int = 1,
        skip_remaining_on_cancel: bool = True,
        clock: Callable[[], datetime] = datetime.now,
        scheme: str = "https",
    ) -> None:
        self._store = store
        self._engine = engine
        self._source = source
        self._max_parallel = max(1, max_parallel_tenants)
        self._skip_remaining_on_cancel = skip_remaining_on_cancel
        self._clock = clock
        self._scheme = scheme
        self.last_report: SyncReport | None = None

    # ------------------------------------------------------------------
    # Batch sync
    # ------------------------------------------------------------------

    async def run_all(
        self,
        force_all: bool = False,
        since: datetime | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> SyncReport:
        """Sync every tenant once and return the consolidated report."""
        cancel_event = cancel_event or asyncio.Event()
        report = SyncReport(started_at=self._clock(), force_all=force_all, since=since)
        tenants = await self._store.list()
        logger.info(
            "sync_run_started",
            tenants=len(tenants),
            force_all=force_all,
            since=since.isoformat() if since else None,
        )

        semaphore = asyncio.Semaphore(self._max_parallel)

        async def _bounded(tenant: TenantConfig) -> TenantOutcome:
            async with semaphore:
                return await self._run_tenant(tenant, force_all, since, cancel_event)

        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(_bounded(tenant)) for tenant in tenants]

        report.outcomes = [task.result() for task in tasks]
        report.finished_at = self._clock()
        self.last_report = report
        self._log_report(report)
        return report

    async def _run_tenant(
        self,
        tenant: TenantConfig,
        force_all: bool,
        since: datetime | None,
        cancel_event: asyncio.Event,
    ) -> TenantOutcome:
        if cancel_event.is_set():
            if self._skip_remaining_on_cancel:
                logger.info("tenant_skipped_after_cancel", org_id=tenant.org_id)
                return TenantOutcome(org_id=tenant.org_id, status=OutcomeStatus.CANCELLED)
            # Only the tenants in flight when the cancel arrived are aborted.
            cancel_event = asyncio.Event()

        try:
            return await self._engine.sync_tenant(
                tenant,
                now=self._clock(),
                force_all=force_all,
                since=since,
                cancel_event=cancel_event,
            )
        except Exception as exc:
            logger.exception("tenant_sync_crashed", org_id=tenant.org_id)
            return TenantOutcome(
                org_id=tenant.org_id,
                status=OutcomeStatus.FAILED,
                error_kind="internal",
                error_detail=f"{type(exc).__name__}: {exc}",
            )

    @staticmethod
    def _log_report(report: SyncReport) -> None:
        for entry in report.entries:
            logger.info(
                "sync_result_entry",
                org_id=entry.org_id,
                run_at=entry.run_at.isoformat(),
                created_date=entry.created_date.isoformat(),
                filename=entry.filename,
                service_owner=entry.service_owner,
            )
        for outcome in report.outcomes:
            if outcome.status == OutcomeStatus.FAILED:
                logger.warning(
                    "tenant_outcome_failed",
                    org_id=outcome.org_id,
                    error_kind=outcome.error_kind,
                    error=outcome.error_detail,
                    status_code=outcome.status_code,
                )
        logger.info(
            "sync_report",
            force_all=report.force_all,
            since=report.since.isoformat() if report.since else None,
            completed=report.count(OutcomeStatus.COMPLETED),
            not_due=report.count(OutcomeStatus.NOT_DUE),
            failed=report.count(OutcomeStatus.FAILED),
            cancelled=report.count(OutcomeStatus.CANCELLED),
            attachments=len(report.entries),
        )

    # ------------------------------------------------------------------
    # Troubleshooting listing
    # ------------------------------------------------------------------

    async def list_messages(self, with_details: bool = False) -> list[MessageLogEntry]:
        """List every tenant's messages without downloading or touching watermarks.

        With *with_details* each message is re-fetched through its self link,
        which shows what the detail representation reports.
        """
        result: list[MessageLogEntry] = []
        for tenant in await self._store.list():
            try:
                messages = await list_messages(self._source, tenant, scheme=self._scheme)
                for message in messages:
                    if with_details:
                        message = await self._source.get_detail(message.self_href, tenant)
                    result.append(self._log_entry(tenant, message))
            except SyncError as exc:
                logger.error(
                    "tenant_listing_failed",
                    org_id=tenant.org_id,
                    error_kind=exc.kind,
                    error=exc.detail,
                )
            except Exception:
                logger.exception("tenant_listing_crashed", org_id=tenant.org_id)
        return result

    def _log_entry(self, tenant: TenantConfig, message: MessageSummary) -> MessageLogEntry:
        return MessageLogEntry(
            org_id=tenant.org_id,
            run_at=self._clock(),
            created_date=message.created_date,
            subject=message.subject,
            service_owner=message.service_owner,
            service_code=message.service_code,
            service_edition=message.service_edition,
        )
