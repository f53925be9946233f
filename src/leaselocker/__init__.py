"""LeaseLocker - time-bounded leases over a conditional-write store."""

from leaselocker.engine import (
    LeaseContention,
    LeaseLockerError,
    LeaseLost,
    LeaseNotObtained,
    Locker,
    PayloadDecodeError,
    StoreUnavailable,
)
from leaselocker.models import (
    HeartbeatResult,
    HeartbeatState,
    Lease,
    LeaseRequest,
    StaticLeaseRequest,
)
from leaselocker.stores import (
    LeaseTableConfig,
    LockerStore,
    MemoryLockerStore,
    SQLLockerStore,
)

__all__ = [
    "HeartbeatResult",
    "HeartbeatState",
    "Lease",
    "LeaseContention",
    "LeaseLockerError",
    "LeaseLost",
    "LeaseNotObtained",
    "LeaseRequest",
    "LeaseTableConfig",
    "Locker",
    "LockerStore",
    "MemoryLockerStore",
    "PayloadDecodeError",
    "SQLLockerStore",
    "StaticLeaseRequest",
    "StoreUnavailable",
]
