"""Lease model - a lessee's time-bounded claim on one item."""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, ValidationError

from leaselocker.engine.errors import PayloadDecodeError


@runtime_checkable
class LeaseRequest(Protocol):
    """Describes who wants a lease, for how long, and how to read its payload."""

    def lessee_id(self) -> str:
        """Stable identity stored as the owner marker."""
        ...

    def lease_duration(self) -> timedelta:
        """Validity window from now. Re-read on every renewal."""
        ...

    def decode_payload(self, attributes: Optional[Mapping[str, Any]]) -> Any:
        """Convert stored attributes into caller data."""
        ...


class StaticLeaseRequest:
    """
    Lease request with a fixed lessee ID and an adjustable duration.

    When ``payload_model`` is given, stored attributes are validated into an
    instance of it; otherwise the payload is a plain dict of the attributes.
    """

    def __init__(
        self,
        lessee_id: str,
        duration: timedelta,
        payload_model: Optional[type[BaseModel]] = None,
    ):
        if not lessee_id:
            raise ValueError("lessee_id must be a non-empty string")
        if duration <= timedelta(0):
            raise ValueError("duration must be positive")
        self._lessee_id = lessee_id
        self._duration = duration
        self.payload_model = payload_model

    def lessee_id(self) -> str:
        return self._lessee_id

    def lease_duration(self) -> timedelta:
        return self._duration

    def extend_to(self, duration: timedelta) -> None:
        """Change the duration used by subsequent renewals."""
        if duration <= timedelta(0):
            raise ValueError("duration must be positive")
        self._duration = duration

    def decode_payload(self, attributes: Optional[Mapping[str, Any]]) -> Any:
        data = dict(attributes or {})
        if self.payload_model is None:
            return data
        try:
            return self.payload_model.model_validate(data)
        except ValidationError as e:
            raise PayloadDecodeError(str(e)) from e

    def __repr__(self) -> str:
        return f"StaticLeaseRequest(lessee_id={self._lessee_id!r}, duration={self._duration!r})"


class Lease(BaseModel):
    """Represents a lessee's exclusive claim on an item."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    item_id: str
    payload: Any = None
    request: LeaseRequest
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if lease has expired."""
        if now is None:
            now = datetime.now(timezone.utc)
        return now >= self.expires_at

    def remaining(self, now: datetime | None = None) -> timedelta:
        """Time left before expiry (zero once expired)."""
        if now is None:
            now = datetime.now(timezone.utc)
        return max(self.expires_at - now, timedelta(0))

    @property
    def lessee_id(self) -> str:
        return self.request.lessee_id()
