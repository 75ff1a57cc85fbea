from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, select

from claimbroker.adapters.cache import SqlAlchemyCacheBackend, create_cache_tables, identity_cache_table
from claimbroker.domain.model import CacheEntry, Found, IdentifierKind, NotFound, Profile

if TYPE_CHECKING:
    from collections.abc import Iterator

NOW = datetime(2024, 6, 1, 12, tzinfo=UTC)


@pytest.fixture
def backend() -> Iterator[SqlAlchemyCacheBackend]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_cache_tables(engine)
    try:
        yield SqlAlchemyCacheBackend(engine)
    finally:
        engine.dispose()


def _found_entry(key: str = "mpi-profile:icn:1008714701V416111") -> CacheEntry:
    profile = Profile(
        identifiers={IdentifierKind.ICN: "1008714701V416111", IdentifierKind.BIRLS_ID: "796122306"},
        historical_icns=("1008714701V416100",),
        given_names=("Mitchell", "G"),
        family_name="Jenkins",
        birth_date=date(1949, 3, 4),
        gender="M",
        ssn="796122306",
    )
    return CacheEntry(key=key, outcome=Found(profile), stored_at=NOW, ttl=timedelta(days=1))


def test_found_entry_survives_storage_without_ssn(backend: SqlAlchemyCacheBackend) -> None:
    entry = _found_entry()
    backend.set(entry)

    stored = backend.get(entry.key, now=NOW + timedelta(hours=1))

    assert stored is not None
    assert isinstance(stored.outcome, Found)
    profile = stored.outcome.profile
    assert profile.icn == "1008714701V416111"
    assert profile.birls_id == "796122306"
    assert profile.given_names == ("Mitchell", "G")
    assert profile.birth_date == date(1949, 3, 4)
    assert profile.ssn is None
    assert stored.ttl == timedelta(days=1)
    assert stored.stored_at == NOW


def test_not_found_entry_expires(backend: SqlAlchemyCacheBackend) -> None:
    entry = CacheEntry(key="k", outcome=NotFound(), stored_at=NOW, ttl=timedelta(minutes=30))
    backend.set(entry)

    assert backend.get("k", now=NOW + timedelta(minutes=29)) is not None
    assert backend.get("k", now=NOW + timedelta(minutes=31)) is None


def test_set_overwrites_the_row_for_a_key(backend: SqlAlchemyCacheBackend) -> None:
    backend.set(CacheEntry(key="k", outcome=NotFound(), stored_at=NOW, ttl=timedelta(minutes=30)))
    backend.set(_found_entry("k"))

    stored = backend.get("k", now=NOW)
    with backend.engine.connect() as connection:
        rows = connection.execute(select(identity_cache_table.c.key)).all()

    assert stored is not None
    assert isinstance(stored.outcome, Found)
    assert len(rows) == 1


def test_delete_and_purge_expired(backend: SqlAlchemyCacheBackend) -> None:
    backend.set(CacheEntry(key="old", outcome=NotFound(), stored_at=NOW, ttl=timedelta(minutes=1)))
    backend.set(_found_entry("fresh"))
    backend.delete("fresh")

    assert backend.get("fresh", now=NOW) is None
    assert backend.purge_expired(now=NOW + timedelta(hours=1)) == 1
