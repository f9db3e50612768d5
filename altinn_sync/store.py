"""Tenant store: tenant records and their persisted watermarks."""

from __future__ import annotations

import asyncio
from typing import Protocol

import structlog
from sqlalchemy import Integer, Text, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .models import TenantConfig

logger = structlog.get_logger()


class TenantStore(Protocol):
    """Contract the sync engine relies on. ``update`` must be safe for
    concurrent calls on distinct tenants."""

    async def list(self) -> list[TenantConfig]: ...

    async def update(self, tenant: TenantConfig) -> None: ...


class Base(DeclarativeBase):
    pass


class TenantRow(Base):
    __tablename__ = "tenants"

    org_id: Mapped[str] = mapped_column(Text, primary_key=True)
    host: Mapped[str] = mapped_column(Text, nullable=False)
    storage_path: Mapped[str] = mapped_column(Text, nullable=False)
    credential_ref: Mapped[str] = mapped_column(Text, nullable=False, default="default")
    watermark_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    watermark_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_model(self) -> TenantConfig:
        return TenantConfig(
            org_id=self.org_id,
            host=self.host,
            storage_path=self.storage_path,
            credential_ref=self.credential_ref,
            watermark_date=self.watermark_date,
            watermark_time=self.watermark_time,
        )


class SqlTenantStore:
    """Async SQLAlchemy tenant store.

    Updates go through a lock so the store serializes its own writes when
    tenants are synced in parallel.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        self._write_lock = asyncio.Lock()

    @classmethod
    def from_url(cls, url: str) -> SqlTenantStore:
        return cls(create_async_engine(url, echo=False))

    async def create_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self._engine.dispose()

    async def list(self) -> list[TenantConfig]:
        async with self._session() as session:
            result = await session.execute(select(TenantRow).order_by(TenantRow.org_id))
            return [row.to_model() for row in result.scalars().all()]

    async def add(self, tenant: TenantConfig) -> None:
        async with self._write_lock, self._session() as session:
            session.add(TenantRow(**tenant.model_dump()))
            await session.commit()
        logger.info("tenant_added", org_id=tenant.org_id)

    async def update(self, tenant: TenantConfig) -> None:
        async with self._write_lock, self._session() as session:
            row = await session.get(TenantRow, tenant.org_id)
            if row is None:
                raise LookupError(f"unknown tenant {tenant.org_id}")
            row.watermark_date = tenant.watermark_date
            row.watermark_time = tenant.watermark_time
            await session.commit()


class InMemoryTenantStore:
    """Dict-backed store for tests and dry runs."""

    def __init__(self, tenants: list[TenantConfig] | None = None) -> None:
        self._tenants = {t.org_id: t for t in tenants or []}
        self._write_lock = asyncio.Lock()

    async def list(self) -> list[TenantConfig]:
        return list(self._tenants.values())

    async def update(self, tenant: TenantConfig) -> None:
        async with self._write_lock:
            if tenant.org_id not in self._tenants:
                raise LookupError(f"unknown tenant {tenant.org_id}")
            self._tenants[tenant.org_id] = tenant

    def get(self, org_id: str) -> TenantConfig:
        return self._tenants[org_id]
