"""In-process lease store."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

from leaselocker.engine.errors import LeaseContention
from leaselocker.models.lease import Lease, LeaseRequest
from leaselocker.stores.base import LeaseItemState
from leaselocker.utils.time import utc_now

logger = logging.getLogger(__name__)


class MemoryLockerStore:
    """
    Lease store for single-process mode and tests.

    Applies the same acquire-or-renew condition as the SQL store under an
    asyncio lock, so concurrent lockers on one event loop see exactly one
    winner per item.
    """

    def __init__(
        self,
        items: Iterable[str] = (),
        *,
        now_provider: Callable[[], datetime] | None = None,
    ):
        self._items: dict[str, LeaseItemState] = {}
        self._lock = asyncio.Lock()
        self._now_provider = now_provider or utc_now
        for item_id in items:
            self.add_item(item_id)

    def add_item(self, item_id: str, attributes: Mapping[str, Any] | None = None) -> None:
        """Add an unheld item, or replace the attributes of an existing one."""
        item = self._items.get(item_id)
        if item is None:
            self._items[item_id] = LeaseItemState(item_id=item_id, attributes=dict(attributes or {}))
        elif attributes is not None:
            item.attributes = dict(attributes)

    def get_item(self, item_id: str) -> LeaseItemState | None:
        return self._items.get(item_id)

    async def list_lease_ids(self) -> list[str]:
        return list(self._items)

    async def lease(self, item_id: str, request: LeaseRequest, until: datetime) -> Lease:
        lessee_id = request.lessee_id()
        async with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise LeaseContention(item_id, lessee_id)
            if item.is_held(self._now_provider()) and item.lessee_id != lessee_id:
                raise LeaseContention(item_id, lessee_id)
            item.lessee_id = lessee_id
            item.lease_until = until
            attributes = dict(item.attributes)

        logger.debug(f"Leased item {item_id} to {lessee_id} until {until.isoformat()}")
        return Lease(
            item_id=item_id,
            payload=request.decode_payload(attributes or None),
            request=request,
            expires_at=until,
        )
