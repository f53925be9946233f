"""Backing store port consumed by the locker."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol

from leaselocker.models.lease import Lease, LeaseRequest


@dataclass
class LeaseItemState:
    """Stored state of one lockable item."""

    item_id: str
    lessee_id: Optional[str] = None
    lease_until: Optional[datetime] = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def is_held(self, now: datetime) -> bool:
        """True while the stored expiry has not passed."""
        return self.lease_until is not None and self.lease_until >= now


class LockerStore(Protocol):
    """
    Storage that can list lockable items and conditionally lease one.

    ``lease`` must be a single atomic write of owner and expiry that succeeds
    only if the item exists and either its stored expiry is in the past or its
    stored owner is ``request.lessee_id()``. A failed condition raises
    LeaseContention; infrastructure failures raise StoreUnavailable.
    """

    async def list_lease_ids(self) -> list[str]:
        """Return the key of every lockable item."""
        ...

    async def lease(self, item_id: str, request: LeaseRequest, until: datetime) -> Lease:
        """Acquire or renew the lease on ``item_id`` until ``until``."""
        ...
