"""Watermark policy: when a tenant is due and where the next query starts.

The watermark lives on the tenant record as two integers, ``YYYYMMDD`` and
``HHMMSS``. These helpers are pure; only :func:`advance` touches the store.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

import structlog

from .errors import WatermarkNotConfigured
from .models import TenantConfig

if TYPE_CHECKING:
    from .store import TenantStore

logger = structlog.get_logger()

DATE_FORMAT = "%Y%m%d"
TIME_FORMAT = "%H%M%S"


def date_to_int(value: date) -> int:
    return int(value.strftime(DATE_FORMAT))


def time_to_int(value: datetime) -> int:
    return int(value.strftime(TIME_FORMAT))


def is_sync_needed(tenant: TenantConfig, now: datetime, *, force: bool = False) -> bool:
    """Return whether *tenant* has not been synced yet on ``now``'s calendar day.

    Two triggers on the same day are duplicates whatever their time of day.
    Raises :class:`WatermarkNotConfigured` for a tenant that was never synced.
    """
    if force:
        return True
    if tenant.watermark_date == 0:
        raise WatermarkNotConfigured(tenant.org_id)
    due = tenant.watermark_date < date_to_int(now.date())
    logger.debug(
        "watermark_checked",
        org_id=tenant.org_id,
        watermark_date=tenant.watermark_date,
        due=due,
    )
    return due


def since_timestamp(tenant: TenantConfig) -> datetime:
    """Combine the stored date and time-of-day into one point in time."""
    if tenant.watermark_date == 0:
        raise WatermarkNotConfigured(tenant.org_id)
    # e.g. 3 -> 000003 (00:00:03), 122333 -> 12:23:33
    padded_time = f"{tenant.watermark_time:06d}"
    return datetime.strptime(f"{tenant.watermark_date}{padded_time}", DATE_FORMAT + TIME_FORMAT)


async def advance(tenant: TenantConfig, now: datetime, store: TenantStore) -> TenantConfig:
    """Move the watermark to *now* and persist it through *store*."""
    updated = tenant.model_copy(
        update={"watermark_date": date_to_int(now.date()), "watermark_time": time_to_int(now)},
    )
    await store.update(updated)
    logger.info(
        "watermark_advanced",
        org_id=tenant.org_id,
        watermark_date=updated.watermark_date,
        watermark_time=updated.watermark_time,
    )
    return updated
