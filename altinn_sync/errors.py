"""Error taxonomy for a tenant sync.

Every error is tenant-local: the engine turns it into a failed
:class:`~altinn_sync.models.TenantOutcome` and the runner moves on.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base class for failures that abort one tenant's run."""

    kind: str = "sync"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ConfigurationError(SyncError):
    """Tenant or credential configuration is unusable."""

    kind = "configuration"


class WatermarkNotConfigured(ConfigurationError):
    """The tenant has never been synced (watermark date is zero)."""

    def __init__(self, org_id: str) -> None:
        super().__init__(f"watermark date not set for org {org_id}")
        self.org_id = org_id


class RemoteError(SyncError):
    """The remote API answered with a non-success status."""

    kind = "remote"

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500


class TransportError(SyncError):
    """Network failure or timeout talking to the remote API."""

    kind = "transport"


class StorageError(SyncError):
    """Writing an attachment to the tenant's storage path failed."""

    kind = "io"
