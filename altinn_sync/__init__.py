"""Altinn attachment sync.

Public API re-exported here for convenience::

    from altinn_sync import SyncEngine, SyncRunner, TenantConfig
"""

from .auth import CredentialProvider
from .config import AltinnConfig, RetryConfig, SyncConfig
from .downloader import FileDownloader
from .engine import SyncEngine
from .errors import (
    ConfigurationError,
    RemoteError,
    StorageError,
    SyncError,
    TransportError,
    WatermarkNotConfigured,
)
from .feed import FALLBACK, PRIMARY, list_merged, list_messages
from .logging import setup_logging
from .models import (
    AttachmentRef,
    MessageDetail,
    MessageLogEntry,
    MessageSummary,
    OutcomeStatus,
    ServiceClassification,
    SyncReport,
    SyncResultEntry,
    TenantConfig,
    TenantOutcome,
)
from .naming import attachment_filename
from .resolver import AttachmentResolver
from .runner import SyncRunner
from .store import InMemoryTenantStore, SqlTenantStore, TenantStore
from .transport import FeedTransport

__all__ = [
    "AltinnConfig",
    "AttachmentRef",
    "AttachmentResolver",
    "ConfigurationError",
    "CredentialProvider",
    "FALLBACK",
    "FeedTransport",
    "FileDownloader",
    "InMemoryTenantStore",
    "MessageDetail",
    "MessageLogEntry",
    "MessageSummary",
    "OutcomeStatus",
    "PRIMARY",
    "RemoteError",
    "RetryConfig",
    "ServiceClassification",
    "SqlTenantStore",
    "StorageError",
    "SyncConfig",
    "SyncEngine",
    "SyncError",
    "SyncReport",
    "SyncResultEntry",
    "SyncRunner",
    "TenantConfig",
    "TenantOutcome",
    "TenantStore",
    "TransportError",
    "WatermarkNotConfigured",
    "attachment_filename",
    "list_merged",
    "list_messages",
    "setup_logging",
]
