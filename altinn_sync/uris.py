"""URI builder for the Altinn message feed.

Filters are expressed as an OData ``$filter`` clause on
``{scheme}://{host}/api/{org}/messages``.
"""

from __future__ import annotations

from datetime import datetime

import httpx

from .models import ServiceClassification


def _filter_clauses(
    classification: ServiceClassification | None,
    since: datetime | None,
) -> list[str]:
    clauses: list[str] = []
    if classification is not None:
        clauses.append(f"ServiceOwner eq '{classification.owner}'")
        clauses.append(f"ServiceCode eq '{classification.code}'")
        clauses.append(f"ServiceEdition eq {classification.edition}")
    if since is not None:
        clauses.append(f"CreatedDate gt datetime'{since.replace(microsecond=0).isoformat()}'")
    return clauses


def messages_uri(
    host: str,
    org_id: str,
    *,
    classification: ServiceClassification | None = None,
    since: datetime | None = None,
    scheme: str = "https",
) -> str:
    """Build the message-feed URI for one organization.

    >>> messages_uri("www.altinn.no", "910021451")
    'https://www.altinn.no/api/910021451/messages'
    """
    base = f"{scheme}://{host}/api/{org_id}/messages"
    clauses = _filter_clauses(classification, since)
    if not clauses:
        return base
    return str(httpx.URL(base, params={"$filter": " and ".join(clauses)}))
