"""LeaseLocker engine - lease acquisition and heartbeat."""

from leaselocker.engine.errors import (
    LeaseContention,
    LeaseLockerError,
    LeaseLost,
    LeaseNotObtained,
    PayloadDecodeError,
    StoreUnavailable,
)
from leaselocker.engine.locker import Locker

__all__ = [
    "LeaseContention",
    "LeaseLockerError",
    "LeaseLost",
    "LeaseNotObtained",
    "Locker",
    "PayloadDecodeError",
    "StoreUnavailable",
]
