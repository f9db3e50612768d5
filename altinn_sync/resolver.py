"""Attachment resolution: summary in, full message with attachment links out."""

from __future__ import annotations

from typing import Protocol

import structlog

from .models import MessageDetail, MessageSummary, TenantConfig

logger = structlog.get_logger()


class DetailSource(Protocol):
    async def get_detail(self, uri: str, tenant: TenantConfig) -> MessageDetail: ...


class AttachmentResolver:
    """Fetches each message's detail representation through its self link."""

    def __init__(self, source: DetailSource) -> None:
        self._source = source

    async def resolve(self, tenant: TenantConfig, summary: MessageSummary) -> MessageDetail:
        detail = await self._source.get_detail(summary.self_href, tenant)
        logger.debug(
            "message_resolved",
            org_id=tenant.org_id,
            message_id=detail.message_id,
            attachments=[ref.name for ref in detail.attachments],
        )
        return detail
