"""Parsing of Altinn HAL+JSON message representations."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .models import AttachmentRef, MessageDetail, MessageSummary


def _object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} is not a JSON object: {type(value).__name__}")
    return value


def links_by(document: dict[str, Any], rel: str) -> list[dict[str, Any]]:
    """Return the link objects for *rel*; HAL allows a single object or a list."""
    links = _object(document.get("_links", {}), "_links").get(rel)
    if links is None:
        return []
    if isinstance(links, dict):
        return [links]
    if not isinstance(links, list):
        raise ValueError(f"{rel} links are neither an object nor a list")
    return [_object(link, f"{rel} link") for link in links]


def _self_href(document: dict[str, Any]) -> str:
    links = links_by(document, "self")
    if not links or "href" not in links[0]:
        raise ValueError("message representation has no self link")
    return links[0]["href"]


def _created_date(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"invalid CreatedDate: {value!r}")
    return datetime.fromisoformat(value)


def _summary_fields(document: Any) -> dict[str, Any]:
    document = _object(document, "message")
    return {
        "message_id": str(document.get("MessageId", "")),
        "created_date": _created_date(document.get("CreatedDate")),
        "subject": document.get("Subject") or "",
        "service_owner": document.get("ServiceOwner") or "",
        "service_code": str(document.get("ServiceCode", "")),
        "service_edition": str(document.get("ServiceEdition", "")),
        "self_href": _self_href(document),
    }


def parse_messages(document: Any) -> list[MessageSummary]:
    """Parse a message-feed page into summaries, in feed order.

    Raises :class:`ValueError` on a malformed representation.
    """
    embedded = _object(_object(document, "message list").get("_embedded", {}), "_embedded")
    items = embedded.get("messages", [])
    if not isinstance(items, list):
        raise ValueError("_embedded.messages is not a list")
    return [MessageSummary(**_summary_fields(item)) for item in items]


def parse_message(document: Any) -> MessageDetail:
    """Parse a single message representation including its attachment links."""
    fields = _summary_fields(document)
    attachments = [
        AttachmentRef(name=link.get("name") or "", href=link["href"])
        for link in links_by(document, "attachment")
        if "href" in link
    ]
    return MessageDetail(**fields, attachments=attachments)
