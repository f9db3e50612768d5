"""SyncService — wires up collaborators and runs the requested mode."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
import uvicorn

from .api import create_app
from .auth import CredentialProvider
from .config import SyncConfig
from .engine import SyncEngine
from .models import MessageLogEntry, SyncReport
from .runner import SyncRunner
from .scheduler import CronScheduler
from .shutdown import install_signal_handlers
from .store import SqlTenantStore
from .transport import FeedTransport

logger = structlog.get_logger()


class SyncService:
    """Owns the transport and tenant store for one process.

    ``run_once`` is the one-shot trigger, ``serve`` runs the cron scheduler
    and the HTTP surface concurrently until SIGTERM / SIGINT.
    """

    def __init__(self, config: SyncConfig) -> None:
        self.config = config
        self.store = SqlTenantStore.from_url(config.database_url)
        self.transport = FeedTransport(
            config.altinn,
            config.retry,
            CredentialProvider(config.altinn),
        )
        engine = SyncEngine(self.transport, self.store, scheme=config.altinn.scheme)
        self.runner = SyncRunner(
            self.store,
            engine,
            self.transport,
            max_parallel_tenants=config.max_parallel_tenants,
            skip_remaining_on_cancel=config.skip_remaining_on_cancel,
            scheme=config.altinn.scheme,
        )

    @asynccontextmanager
    async def _started(self) -> AsyncIterator[None]:
        await self.store.create_schema()
        await self.transport.start()
        try:
            yield
        finally:
            await self.transport.stop()
            await self.store.close()

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    async def run_once(self, force_all: bool = False, since: datetime | None = None) -> SyncReport:
        cancel_event = asyncio.Event()
        async with self._started():
            uninstall = install_signal_handlers(cancel_event)
            try:
                return await self.runner.run_all(force_all, since, cancel_event=cancel_event)
            finally:
                uninstall()

    async def list_messages(self, with_details: bool = False) -> list[MessageLogEntry]:
        async with self._started():
            return await self.runner.list_messages(with_details)

    async def serve(self) -> None:
        stop_event = asyncio.Event()
        scheduler = CronScheduler(self.runner, self.config.cron)
        install_signal_handlers(stop_event)

        async with self._started():
            try:
                async with asyncio.TaskGroup() as tg:
                    tg.create_task(scheduler.run_forever(stop_event))
                    tg.create_task(self._run_http_server(scheduler, stop_event))
            except* Exception:
                logger.exception("service_task_group_error")
            finally:
                logger.info("service_stopped")

    async def _run_http_server(self, scheduler: CronScheduler, stop_event: asyncio.Event) -> None:
        """Serve the trigger/health app until the stop event fires."""
        server = uvicorn.Server(
            uvicorn.Config(
                create_app(scheduler),
                host="0.0.0.0",
                port=self.config.health_port,
                log_level="warning",
            )
        )
        serve_task = asyncio.create_task(server.serve())
        await stop_event.wait()
        server.should_exit = True
        await serve_task
