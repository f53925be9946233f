"""Lease store implementations."""

from leaselocker.stores.base import LeaseItemState, LockerStore
from leaselocker.stores.memory import MemoryLockerStore
from leaselocker.stores.sql import LeaseTableConfig, SQLLockerStore, build_lease_table

__all__ = [
    "LeaseItemState",
    "LeaseTableConfig",
    "LockerStore",
    "MemoryLockerStore",
    "SQLLockerStore",
    "build_lease_table",
]
