"""Data models for tenants, remote messages and sync results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OutcomeStatus(str, Enum):
    """Terminal state of one tenant's sync run."""

    NOT_DUE = "not_due"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TenantConfig(BaseModel):
    """One local organization and its remote Altinn account.

    The watermark is stored the way the tenant table stores it: the date as
    a ``YYYYMMDD`` integer (``0`` means never synced) and the time of day as
    an ``HHMMSS`` integer without leading zeros.
    """

    org_id: str = Field(description="Organization number at the remote system")
    host: str = Field(description="Remote API host, e.g. www.altinn.no")
    storage_path: str = Field(description="Directory attachments are written to")
    credential_ref: str = Field(
        default="default",
        description="Key used by the credential provider to find this tenant's API key",
    )
    watermark_date: int = Field(default=0, description="Last synced date as YYYYMMDD")
    watermark_time: int = Field(default=0, description="Last synced time of day as HHMMSS")


class ServiceClassification(BaseModel):
    """Three-part remote taxonomy identifying a document workflow."""

    model_config = ConfigDict(frozen=True)

    owner: str
    code: str
    edition: str


class MessageSummary(BaseModel):
    """One remote business document as returned by the message feed."""

    model_config = ConfigDict(frozen=True)

    message_id: str = ""
    created_date: datetime
    subject: str = ""
    service_owner: str = ""
    service_code: str = ""
    service_edition: str = ""
    self_href: str


class AttachmentRef(BaseModel):
    """Display name and fetch reference of one attachment."""

    model_config = ConfigDict(frozen=True)

    name: str
    href: str


class MessageDetail(MessageSummary):
    """A message's full representation including its attachment references."""

    attachments: list[AttachmentRef] = Field(default_factory=list)


class SyncResultEntry(BaseModel):
    """Audit record for one stored attachment."""

    org_id: str
    run_at: datetime
    created_date: datetime
    filename: str
    service_owner: str


class MessageLogEntry(BaseModel):
    """Audit record for one listed message (troubleshooting listing)."""

    org_id: str
    run_at: datetime
    created_date: datetime
    subject: str
    service_owner: str
    service_code: str
    service_edition: str


class TenantOutcome(BaseModel):
    """Result of one tenant's run: ``NotDue``, ``Completed(n)`` or ``Failed(kind, detail)``."""

    org_id: str
    status: OutcomeStatus
    messages: int = Field(default=0, description="Messages processed in this run")
    entries: list[SyncResultEntry] = Field(default_factory=list)
    error_kind: str | None = None
    error_detail: str | None = None
    status_code: int | None = None


class SyncReport(BaseModel):
    """Consolidated per-tenant outcomes for one batch run."""

    started_at: datetime
    finished_at: datetime | None = None
    force_all: bool = False
    since: datetime | None = None
    outcomes: list[TenantOutcome] = Field(default_factory=list)

    @property
    def entries(self) -> list[SyncResultEntry]:
        return [entry for outcome in self.outcomes for entry in outcome.entries]

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)


class ServiceStatus(str, Enum):
    """Runtime status of the scheduler service."""

    STARTING = "starting"
    IDLE = "idle"
    SYNCING = "syncing"
    DEGRADED = "degraded"
    STOPPING = "stopping"
    STOPPED = "stopped"


class HealthStatus(BaseModel):
    """Response model for the /health endpoint."""

    service_name: str = Field(description="Name of the service")
    status: ServiceStatus = Field(description="Current service status")
    uptime_seconds: float = Field(description="Seconds since the service started")
    next_run_at: datetime | None = Field(default=None, description="Next scheduled run")
    last_run_started_at: datetime | None = Field(default=None, description="Start of the last run")
    last_run_finished_at: datetime | None = Field(default=None, description="End of the last run")
    last_run_failed_tenants: list[str] = Field(
        default_factory=list,
        description="Tenants whose last run ended in failure",
    )
