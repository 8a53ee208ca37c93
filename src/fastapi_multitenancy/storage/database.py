"""Relational tenant directory on top of SQLAlchemy's asyncio extension.

Any dialect with an async driver works (``sqlite+aiosqlite://``,
``postgresql+asyncpg://`` ...).  Tenants live in a single ``tenants`` table
whose ``identifier`` column stores the canonical name under a unique index,
so a lookup during resolution is one indexed equality query.

SQLite URLs get a ``StaticPool`` so that an in-memory database is shared
across tasks.  Other dialects get a regular pool sized by the constructor
arguments.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, String, Text, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from fastapi_multitenancy.core.exceptions import TenancyError, TenantNotFoundError
from fastapi_multitenancy.core.types import Tenant, TenantStatus
from fastapi_multitenancy.storage.tenant_store import TenantStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime:
    # SQLite hands back naive datetimes.
    if value is None:
        return datetime.now(UTC)
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _engine_options(database_url: str, **pool: Any) -> dict[str, Any]:
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {**pool, "pool_recycle": 3600}


#####################################################################
# Table
#####################################################################


class _Base(DeclarativeBase):
    pass


class TenantModel(_Base):
    """Row in the ``tenants`` table."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    identifier: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(50), default="active", index=True)
    metadata_json: Mapped[str] = mapped_column(
        "metadata", Text, default="{}", server_default="{}"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantModel:
        row = cls(id=tenant.id, created_at=tenant.created_at)
        row.copy_from(tenant)
        row.updated_at = tenant.updated_at
        return row

    def copy_from(self, tenant: Tenant) -> None:
        """Overwrite the mutable columns with the values held by ``tenant``."""
        self.identifier = tenant.identifier
        self.name = tenant.name
        self.status = tenant.status.value
        self.metadata_json = json.dumps(tenant.metadata)

    def to_domain(self) -> Tenant:
        try:
            metadata = json.loads(self.metadata_json or "{}")
        except (TypeError, ValueError):
            logger.warning("Unreadable metadata for tenant id=%s; using {}", self.id)
            metadata = {}
        return Tenant(
            id=self.id,
            identifier=self.identifier,
            name=self.name,
            status=TenantStatus(self.status),
            metadata=metadata,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


#####################################################################
# Store
#####################################################################


class SQLAlchemyTenantStore(TenantStore[Tenant]):
    """Tenant store persisted through an ``AsyncEngine``.

    Call :meth:`initialize` once at startup to create the table and
    :meth:`close` at shutdown to dispose of the pool.
    :meth:`TenancyManager.create_lifespan` does both.

    Args:
        database_url: Async SQLAlchemy URL.
        pool_size: Persistent connections kept by non-SQLite pools.
        max_overflow: Extra connections allowed above ``pool_size``.
        pool_pre_ping: Test each connection on checkout.
        echo: Echo emitted SQL to the ``sqlalchemy.engine`` logger.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ) -> None:
        options = _engine_options(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
        )
        self._engine = create_async_engine(database_url, echo=echo, **options)
        self._sessions = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

    async def initialize(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(_Base.metadata.create_all)
        logger.info("Tenant table ready on %s", self._engine.url.get_backend_name())

    async def close(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def _transaction(self, action: str) -> AsyncIterator[AsyncSession]:
        """Session that commits on exit and maps driver errors.

        Unique-constraint violations become ``ValueError``; any other
        non-tenancy failure is wrapped in :class:`TenancyError`.
        """
        async with self._sessions() as session:
            try:
                yield session
                await session.commit()
            except TenancyError:
                await session.rollback()
                raise
            except IntegrityError as exc:
                await session.rollback()
                raise ValueError(f"Tenant already exists ({action}): {exc.orig}") from exc
            except Exception as exc:
                await session.rollback()
                raise TenancyError(f"Could not {action} tenant: {exc}") from exc

    async def _row(self, session: AsyncSession, tenant_id: str) -> TenantModel:
        row = await session.get(TenantModel, tenant_id)
        if row is None:
            raise TenantNotFoundError(identifier=tenant_id)
        return row

    #####################################################################
    # Lookups
    #####################################################################

    async def find_by_canonical_name(self, canonical_name: str) -> Tenant | None:
        stmt = select(TenantModel).where(TenantModel.identifier == canonical_name)
        async with self._sessions() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return None if row is None else row.to_domain()

    async def get_by_id(self, tenant_id: str) -> Tenant:
        async with self._sessions() as session:
            return (await self._row(session, tenant_id)).to_domain()

    async def get_by_identifier(self, identifier: str) -> Tenant:
        found = await self.find_by_canonical_name(identifier)
        if found is None:
            raise TenantNotFoundError(identifier=identifier)
        return found

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        status: TenantStatus | None = None,
    ) -> list[Tenant]:
        stmt = select(TenantModel).order_by(TenantModel.created_at.desc())
        if status is not None:
            stmt = stmt.where(TenantModel.status == status.value)
        async with self._sessions() as session:
            rows = (await session.scalars(stmt.offset(skip).limit(limit))).all()
        return [row.to_domain() for row in rows]

    #####################################################################
    # Writes
    #####################################################################

    async def create(self, tenant: Tenant) -> Tenant:
        row = TenantModel.from_domain(tenant)
        async with self._transaction("create") as session:
            session.add(row)
        logger.info("Stored tenant %s as %r", tenant.id, tenant.identifier)
        return row.to_domain()

    async def update(self, tenant: Tenant) -> Tenant:
        async with self._transaction("update") as session:
            row = await self._row(session, tenant.id)
            row.copy_from(tenant)
            row.updated_at = datetime.now(UTC)
        return row.to_domain()

    async def delete(self, tenant_id: str) -> None:
        async with self._transaction("delete") as session:
            await session.delete(await self._row(session, tenant_id))
        logger.info("Removed tenant %s", tenant_id)


__all__ = ["SQLAlchemyTenantStore", "TenantModel"]
