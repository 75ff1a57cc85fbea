"""SQLAlchemy-backed identity cache shared between processes."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Float,
    Index,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.dialects import postgresql, sqlite

from claimbroker.domain.model import CacheEntry

from .schema import CachedOutcome

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)

metadata = MetaData()


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


identity_cache_table = Table(
    "identity_cache",
    metadata,
    Column("key", String(128), primary_key=True),
    Column("payload", Text, nullable=False),
    Column("stored_at", UTCDateTime(), nullable=False),
    Column("ttl_seconds", Float, nullable=False),
    Column("expires_at", UTCDateTime(), nullable=False),
    Index("ix_identity_cache_expires_at", "expires_at"),
)


def create_cache_tables(engine: Engine) -> None:
    metadata.create_all(engine, tables=[identity_cache_table])


def _row_values(entry: CacheEntry) -> dict[str, Any]:
    return {
        "payload": CachedOutcome.from_domain(entry.outcome).model_dump_json(),
        "stored_at": entry.stored_at,
        "ttl_seconds": entry.ttl.total_seconds(),
        "expires_at": entry.expires_at,
    }


class SqlAlchemyCacheBackend:
    """Stores one row per key; writes replace the row in a single transaction."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_uri(cls, uri: str, *, create_tables: bool = True) -> SqlAlchemyCacheBackend:
        engine = create_engine(uri, future=True)
        if create_tables:
            create_cache_tables(engine)
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def get(self, key: str, *, now: datetime) -> CacheEntry | None:
        table = identity_cache_table
        with self._engine.connect() as connection:
            row = connection.execute(
                select(table.c.payload, table.c.stored_at, table.c.ttl_seconds).where(
                    table.c.key == key, table.c.expires_at > now
                )
            ).one_or_none()
        if row is None:
            return None
        outcome = CachedOutcome.model_validate_json(row.payload).to_domain()
        return CacheEntry(
            key=key,
            outcome=outcome,
            stored_at=row.stored_at,
            ttl=timedelta(seconds=row.ttl_seconds),
        )

    def set(self, entry: CacheEntry) -> None:
        values = _row_values(entry)
        with self._engine.begin() as connection:
            self._upsert(connection, entry.key, values)
        log.debug("Stored identity cache entry %s until %s", entry.key, entry.expires_at)

    def delete(self, key: str) -> None:
        with self._engine.begin() as connection:
            connection.execute(
                delete(identity_cache_table).where(identity_cache_table.c.key == key)
            )

    def purge_expired(self, *, now: datetime) -> int:
        with self._engine.begin() as connection:
            result = connection.execute(
                delete(identity_cache_table).where(identity_cache_table.c.expires_at <= now)
            )
        return result.rowcount

    def _upsert(self, connection: Connection, key: str, values: dict[str, Any]) -> None:
        table = identity_cache_table
        dialect_name = connection.dialect.name
        if dialect_name in {"sqlite", "postgresql"}:
            dialect_insert = sqlite.insert if dialect_name == "sqlite" else postgresql.insert
            statement = dialect_insert(table).values(key=key, **values)
            connection.execute(
                statement.on_conflict_do_update(index_elements=[table.c.key], set_=values)
            )
            return

        result = connection.execute(update(table).where(table.c.key == key).values(**values))
        if result.rowcount == 0:
            connection.execute(insert(table).values(key=key, **values))
