"""Feed merge: query the settlement classification and its legacy twin.

During the upstream service migration the same settlement documents are
published under two classifications. Both are queried with identical filters
and the results concatenated, primary first. The remote system keeps the two
disjoint, so nothing is de-duplicated.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

import structlog

from .models import MessageSummary, ServiceClassification, TenantConfig
from .uris import messages_uri

logger = structlog.get_logger()

# Elektronisk kontoutskrift tollkreditt og dagsoppgjør
PRIMARY = ServiceClassification(owner="Skatteetaten", code="5012", edition="171208")

# Brev til etterskuddspliktige. Delete this pair once 5012/171208 is the only
# classification carrying settlements.
FALLBACK = ServiceClassification(owner="Skatteetaten", code="4125", edition="150602")
FALLBACK_CLASSIFICATIONS: tuple[ServiceClassification, ...] = (FALLBACK,)


class MessageSource(Protocol):
    async def list_messages(self, uri: str, tenant: TenantConfig) -> list[MessageSummary]: ...


async def list_messages(
    source: MessageSource,
    tenant: TenantConfig,
    *,
    classification: ServiceClassification | None = None,
    since: datetime | None = None,
    scheme: str = "https",
) -> list[MessageSummary]:
    """List one tenant's messages, optionally filtered by classification and creation time."""
    uri = messages_uri(
        tenant.host,
        tenant.org_id,
        classification=classification,
        since=since,
        scheme=scheme,
    )
    messages = await source.list_messages(uri, tenant)
    logger.info(
        "feed_queried",
        org_id=tenant.org_id,
        service_owner=classification.owner if classification else None,
        service_code=classification.code if classification else None,
        service_edition=classification.edition if classification else None,
        since=since.isoformat() if since else None,
        count=len(messages),
    )
    return messages


async def list_merged(
    source: MessageSource,
    tenant: TenantConfig,
    since: datetime | None,
    *,
    scheme: str = "https",
) -> list[MessageSummary]:
    """Query the primary and fallback classifications and concatenate the results.

    A failure in either sub-query propagates; nothing is swallowed.
    """
    merged = await list_messages(source, tenant, classification=PRIMARY, since=since, scheme=scheme)
    for classification in FALLBACK_CLASSIFICATIONS:
        merged = merged + await list_messages(
            source, tenant, classification=classification, since=since, scheme=scheme
        )
    return merged
