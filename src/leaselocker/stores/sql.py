"""SQLAlchemy-backed lease store."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    Index,
    MetaData,
    String,
    Table,
    insert,
    or_,
    select,
    update,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leaselocker.engine.errors import LeaseContention, StoreUnavailable
from leaselocker.models.lease import Lease, LeaseRequest
from leaselocker.observability.log import log_store_error
from leaselocker.stores.base import LeaseItemState
from leaselocker.utils.time import from_unix_nanos, to_unix_nanos, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaseTableConfig:
    """Names of the lease table and its columns."""

    table_name: str = "leases"
    key_column: str = "lease_id"
    owner_column: str = "lessee_id"
    expiry_column: str = "lease_until"
    attributes_column: str = "attributes"

    @classmethod
    def from_settings(cls, settings: Any) -> "LeaseTableConfig":
        """Build the layout from the ``lease_*`` fields of a Settings object."""
        return cls(
            table_name=settings.lease_table_name,
            key_column=settings.lease_key_column,
            owner_column=settings.lease_owner_column,
            expiry_column=settings.lease_expiry_column,
            attributes_column=settings.lease_attributes_column,
        )


def build_lease_table(metadata: MetaData, config: LeaseTableConfig) -> Table:
    """Define the lease table on ``metadata``."""
    return Table(
        config.table_name,
        metadata,
        Column(config.key_column, String(255), primary_key=True),
        Column(config.owner_column, String(255), nullable=True),
        # Unix nanoseconds; NULL means never leased
        Column(config.expiry_column, BigInteger, nullable=True),
        Column(
            config.attributes_column,
            JSON().with_variant(JSONB(), "postgresql"),
            nullable=False,
        ),
        Index(f"idx_{config.table_name}_expiry", config.expiry_column),
    )


class SQLLockerStore:
    """
    Lease store over a SQL table.

    Acquire and renew are one ``UPDATE ... WHERE ... RETURNING`` statement, so
    the database's row-level write serialization decides every race.
    Requires a dialect with UPDATE ... RETURNING (PostgreSQL, SQLite 3.35+).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: LeaseTableConfig | None = None,
        *,
        metadata: MetaData | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ):
        self.session_factory = session_factory
        self.config = config or LeaseTableConfig()
        self.metadata = metadata if metadata is not None else MetaData()
        self.table = build_lease_table(self.metadata, self.config)
        self._now_provider = now_provider or utc_now

    @property
    def _key(self) -> Column:
        return self.table.c[self.config.key_column]

    @property
    def _owner(self) -> Column:
        return self.table.c[self.config.owner_column]

    @property
    def _expiry(self) -> Column:
        return self.table.c[self.config.expiry_column]

    @property
    def _attributes(self) -> Column:
        return self.table.c[self.config.attributes_column]

    async def list_lease_ids(self) -> list[str]:
        """List the key of every item in the lease table, ordered by key."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(self._key).order_by(self._key))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            log_store_error(logger, "list_lease_ids", e)
            raise StoreUnavailable("list_lease_ids", str(e)) from e

    async def lease(self, item_id: str, request: LeaseRequest, until: datetime) -> Lease:
        """
        Acquire or renew the lease on ``item_id``.

        Raises:
            LeaseContention: item missing, or held by another lessee
            StoreUnavailable: the database could not run the update
        """
        lessee_id = request.lessee_id()
        now_ns = to_unix_nanos(self._now_provider())

        stmt = (
            update(self.table)
            .where(
                self._key == item_id,
                or_(
                    self._expiry.is_(None),
                    self._expiry < now_ns,
                    self._owner == lessee_id,
                ),
            )
            .values({self._owner: lessee_id, self._expiry: to_unix_nanos(until)})
            .returning(self._attributes)
        )

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    row = result.first()
        except SQLAlchemyError as e:
            log_store_error(logger, "lease", e)
            raise StoreUnavailable("lease", str(e)) from e

        if row is None:
            raise LeaseContention(item_id, lessee_id)

        return Lease(
            item_id=item_id,
            payload=request.decode_payload(row[0] or None),
            request=request,
            expires_at=until,
        )

    async def add_items(
        self,
        item_ids: Iterable[str],
        attributes: Mapping[str, Any] | None = None,
    ) -> int:
        """
        Insert unheld items that are not already present.

        Returns the number of rows inserted.
        """
        wanted = list(dict.fromkeys(item_ids))
        if not wanted:
            return 0
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        select(self._key).where(self._key.in_(wanted))
                    )
                    existing = set(result.scalars().all())
                    missing = [item_id for item_id in wanted if item_id not in existing]
                    if missing:
                        await session.execute(
                            insert(self.table),
                            [
                                {
                                    self.config.key_column: item_id,
                                    self.config.attributes_column: dict(attributes or {}),
                                }
                                for item_id in missing
                            ],
                        )
        except SQLAlchemyError as e:
            log_store_error(logger, "add_items", e)
            raise StoreUnavailable("add_items", str(e)) from e

        if missing:
            logger.info(f"Added {len(missing)} lease items to {self.config.table_name}")
        return len(missing)

    async def get_item(self, item_id: str) -> LeaseItemState | None:
        """Read the stored state of one item."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(self._owner, self._expiry, self._attributes).where(
                        self._key == item_id
                    )
                )
                row = result.first()
        except SQLAlchemyError as e:
            log_store_error(logger, "get_item", e)
            raise StoreUnavailable("get_item", str(e)) from e

        if row is None:
            return None
        owner, expiry, attributes = row
        return LeaseItemState(
            item_id=item_id,
            lessee_id=owner,
            lease_until=from_unix_nanos(expiry) if expiry is not None else None,
            attributes=dict(attributes or {}),
        )
