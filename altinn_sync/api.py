"""FastAPI app: manual sync trigger, message listing and health probes."""

from __future__ import annotations

import time
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from .models import HealthStatus, MessageLogEntry, OutcomeStatus, ServiceStatus, SyncReport
from .scheduler import CronScheduler

_HEALTHY = (ServiceStatus.STARTING, ServiceStatus.IDLE, ServiceStatus.SYNCING)


def create_app(scheduler: CronScheduler, *, name: str = "altinn-sync") -> FastAPI:
    """Build the service's HTTP surface around a running *scheduler*.

    ``POST /sync`` is the manual counterpart of the cron trigger and accepts
    the same ``force_all`` / ``since`` overrides as ``SyncRunner.run_all``.
    """
    app = FastAPI(title=name, docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> JSONResponse:
        report = scheduler.runner.last_report
        status = HealthStatus(
            service_name=name,
            status=scheduler.status,
            uptime_seconds=time.monotonic() - scheduler.start_time,
            next_run_at=scheduler.next_run_at,
            last_run_started_at=report.started_at if report else None,
            last_run_finished_at=report.finished_at if report else None,
            last_run_failed_tenants=[
                o.org_id for o in report.outcomes if o.status == OutcomeStatus.FAILED
            ]
            if report
            else [],
        )
        code = 200 if scheduler.status in _HEALTHY else 503
        return JSONResponse(content=status.model_dump(mode="json"), status_code=code)

    @app.get("/ready")
    async def ready() -> JSONResponse:
        is_ready = scheduler.status in (ServiceStatus.IDLE, ServiceStatus.SYNCING)
        return JSONResponse(
            content={"ready": is_ready},
            status_code=200 if is_ready else 503,
        )

    @app.post("/sync", response_model=SyncReport)
    async def sync(
        force_all: bool = Query(default=False, description="Drop the creation-time filter"),
        since: datetime | None = Query(default=None, description="Only messages created after this"),
    ) -> SyncReport:
        if scheduler.busy:
            raise HTTPException(status_code=409, detail="a sync run is already in progress")
        return await scheduler.trigger(force_all, since)

    @app.get("/messages", response_model=list[MessageLogEntry])
    async def messages(
        details: bool = Query(default=False, description="Re-fetch each message's detail"),
    ) -> list[MessageLogEntry]:
        return await scheduler.runner.list_messages(with_details=details)

    return app
