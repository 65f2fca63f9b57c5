"""
Relational idempotency key store built on SQLAlchemy Core.

The ``key`` column is the primary key, so the database decides which of
several concurrent inserts wins. On SQLite and PostgreSQL the insert is an
``INSERT ... ON CONFLICT DO NOTHING`` and the affected row count reports
the winner. Other dialects use a plain insert and treat the unique
violation as the duplicate signal.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from storefront.config import DatabaseConfig
from storefront.errors import DuplicateKeyError
from storefront.schemas.idempotency_schema import (
    IdempotencyRecord,
    InsertResult,
    StoredResponse,
)
from storefront.utils import utc_now

logger = logging.getLogger(__name__)

metadata = MetaData()

idempotency_keys = Table(
    "idempotency_keys",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("response", JSON(none_as_null=True), nullable=True),
    Column("expires_at", DateTime(timezone=True), nullable=False, index=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

_UPSERT_DIALECTS: dict[str, Any] = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlKeyStore:
    """Idempotency records in an ``idempotency_keys`` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "SqlKeyStore":
        connect_args: dict[str, Any] = {}
        if config.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        engine = create_engine(config.url, echo=config.echo, connect_args=connect_args)
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create the ``idempotency_keys`` table if it does not exist."""
        metadata.create_all(self._engine)

    def insert_if_absent(self, key: str, expires_at: datetime) -> InsertResult:
        values = {
            "key": key,
            "response": None,
            "expires_at": _as_utc(expires_at),
            "created_at": utc_now(),
        }
        dialect_insert = _UPSERT_DIALECTS.get(self._engine.dialect.name)

        if dialect_insert is not None:
            stmt = (
                dialect_insert(idempotency_keys)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[idempotency_keys.c.key])
            )
            with self._engine.begin() as conn:
                created = conn.execute(stmt).rowcount == 1
            return InsertResult(created=created)

        try:
            with self._engine.begin() as conn:
                conn.execute(insert(idempotency_keys).values(**values))
        except IntegrityError as exc:
            raise DuplicateKeyError(key) from exc
        return InsertResult(created=True)

    def find(self, key: str) -> Optional[IdempotencyRecord]:
        stmt = select(idempotency_keys).where(idempotency_keys.c.key == key)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return IdempotencyRecord(
            key=row["key"],
            response=row["response"],
            expires_at=_as_utc(row["expires_at"]),
            created_at=_as_utc(row["created_at"]),
        )

    def update(self, key: str, response: StoredResponse) -> bool:
        stmt = (
            update(idempotency_keys)
            .where(idempotency_keys.c.key == key)
            .values(response=response)
        )
        with self._engine.begin() as conn:
            return conn.execute(stmt).rowcount == 1

    def delete(self, key: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(delete(idempotency_keys).where(idempotency_keys.c.key == key))
        logger.debug("Deleted idempotency key %s", key)
