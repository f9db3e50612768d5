"""Tests for altinn_sync.api (FastAPI trigger and health endpoints)."""

from __future__ import annotations

import asyncio
from datetime import datetime

import httpx
import pytest
import pytest_asyncio

from altinn_sync.api import create_app
from altinn_sync.engine import SyncEngine
from altinn_sync.feed import PRIMARY
from altinn_sync.models import OutcomeStatus, ServiceStatus
from altinn_sync.runner import SyncRunner
from altinn_sync.scheduler import CronScheduler

NOW = datetime(2024, 1, 2, 10, 0, 0)


@pytest.fixture
def scheduler(feed, store) -> CronScheduler:
    runner = SyncRunner(store, SyncEngine(feed, store), feed, clock=lambda: NOW)
    return CronScheduler(runner, "0 6-18 * * 1-5", clock=lambda: NOW)


@pytest_asyncio.fixture
async def client(scheduler):
    transport = httpx.ASGITransport(app=create_app(scheduler, name="altinn-sync-test"))
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealth:
    @pytest.mark.asyncio
    async def test_starting_is_healthy(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["service_name"] == "altinn-sync-test"
        assert body["status"] == "starting"
        assert body["last_run_started_at"] is None

    @pytest.mark.asyncio
    async def test_degraded_is_unhealthy(self, client, scheduler):
        scheduler.status = ServiceStatus.DEGRADED
        response = await client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_reports_last_run(self, client, feed, store):
        feed.add_message(PRIMARY, created=datetime(2024, 1, 2, 9, 0), attachments=["a.pdf"])
        await client.post("/sync")

        body = (await client.get("/health")).json()

        assert body["last_run_started_at"] == "2024-01-02T10:00:00"
        assert body["last_run_failed_tenants"] == []

    @pytest.mark.asyncio
    async def test_ready_only_when_idle_or_syncing(self, client, scheduler):
        assert (await client.get("/ready")).status_code == 503
        scheduler.status = ServiceStatus.IDLE
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"ready": True}


class TestSync:
    @pytest.mark.asyncio
    async def test_manual_run(self, client, feed, store, tenant):
        feed.add_message(PRIMARY, created=datetime(2024, 1, 2, 9, 0), attachments=["a.pdf"])

        response = await client.post("/sync")

        assert response.status_code == 200
        (outcome,) = response.json()["outcomes"]
        assert outcome["status"] == "completed"
        assert outcome["entries"][0]["filename"] == "2024-01-02T09:00:00-a.pdf"
        assert store.get(tenant.org_id).watermark_date == 20240102

    @pytest.mark.asyncio
    async def test_overrides(self, client, feed):
        response = await client.post(
            "/sync", params={"force_all": "true", "since": "2023-12-24T00:00:00"}
        )

        body = response.json()
        assert body["force_all"] is True
        assert body["since"] == "2023-12-24T00:00:00"
        list_filters = [httpx.URL(uri).params["$filter"] for kind, uri in feed.calls if kind == "list"]
        assert all("2023-12-24T00:00:00" in f for f in list_filters)

    @pytest.mark.asyncio
    async def test_manual_run_cancelled_by_shutdown(self, client, scheduler, feed, store, tenant):
        feed.add_message(PRIMARY, created=datetime(2024, 1, 2, 9, 0), attachments=["a.pdf"])
        scheduler.stop_event = asyncio.Event()
        scheduler.stop_event.set()

        response = await client.post("/sync")

        (outcome,) = response.json()["outcomes"]
        assert outcome["status"] == OutcomeStatus.CANCELLED.value
        assert feed.calls == []
        assert store.get(tenant.org_id).watermark_date == 20240101

    @pytest.mark.asyncio
    async def test_conflict_while_running(self, client, scheduler):
        async with scheduler._run_lock:
            response = await client.post("/sync")
        assert response.status_code == 409


class TestMessages:
    @pytest.mark.asyncio
    async def test_lists_without_side_effects(self, client, feed, store, tenant):
        feed.add_message(PRIMARY, created=datetime(2024, 1, 2, 9, 0), attachments=["a.pdf"])

        response = await client.get("/messages", params={"details": "true"})

        assert response.status_code == 200
        (entry,) = response.json()
        assert entry["org_id"] == tenant.org_id
        assert entry["service_code"] == "5012"
        assert not any(kind == "bytes" for kind, _ in feed.calls)
        assert store.get(tenant.org_id).watermark_date == 20240101
