"""LeaseLocker data models."""

from leaselocker.models.enums import HeartbeatState
from leaselocker.models.heartbeat import HeartbeatResult
from leaselocker.models.lease import Lease, LeaseRequest, StaticLeaseRequest

__all__ = [
    "HeartbeatResult",
    "HeartbeatState",
    "Lease",
    "LeaseRequest",
    "StaticLeaseRequest",
]
