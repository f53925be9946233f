"""LeaseLocker engine errors."""


class LeaseLockerError(Exception):
    """Base error for LeaseLocker operations."""

    def __init__(self, message: str, code: str = "LEASELOCKER_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class LeaseContention(LeaseLockerError):
    """Item is held by another lessee (or does not exist)."""

    def __init__(self, item_id: str, lessee_id: str = ""):
        super().__init__(
            f"Lease not obtained on item {item_id} for lessee {lessee_id}",
            "LEASE_CONTENTION",
        )
        self.item_id = item_id
        self.lessee_id = lessee_id


class LeaseNotObtained(LeaseLockerError):
    """Every candidate item was contended."""

    def __init__(self, lessee_id: str, candidates: int = 0):
        super().__init__(
            f"Unable to acquire any lease for lessee {lessee_id} ({candidates} candidates)",
            "LEASE_NOT_OBTAINED",
        )
        self.lessee_id = lessee_id
        self.candidates = candidates


class LeaseLost(LeaseLockerError):
    """A renewal was rejected because another lessee took the item."""

    def __init__(self, item_id: str, lessee_id: str = ""):
        super().__init__(
            f"Lease lost on item {item_id} for lessee {lessee_id}",
            "LEASE_LOST",
        )
        self.item_id = item_id
        self.lessee_id = lessee_id


class StoreUnavailable(LeaseLockerError):
    """Backing store failed for reasons unrelated to lease ownership."""

    def __init__(self, operation: str, detail: str = ""):
        message = f"Lease store {operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, "STORE_UNAVAILABLE")
        self.operation = operation
        self.detail = detail


class PayloadDecodeError(LeaseLockerError):
    """Stored attributes could not be decoded into a lease payload."""

    def __init__(self, detail: str):
        super().__init__(f"Lease payload could not be decoded: {detail}", "PAYLOAD_DECODE_ERROR")
        self.detail = detail
