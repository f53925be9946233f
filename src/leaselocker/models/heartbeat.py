"""Heartbeat result model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from leaselocker.engine.errors import LeaseLost
from leaselocker.models.enums import HeartbeatState


class HeartbeatResult(BaseModel):
    """Terminal outcome of a heartbeat session."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: HeartbeatState
    item_id: Optional[str] = None
    lessee_id: str
    renewals: int = 0
    error: Optional[Exception] = None

    @property
    def lost(self) -> bool:
        return self.state == HeartbeatState.LOST

    @property
    def failed(self) -> bool:
        return self.state == HeartbeatState.FAILED

    def raise_for_state(self) -> None:
        """Raise LeaseLost for a lost lease or the store error for a failed one."""
        if self.state == HeartbeatState.LOST:
            raise LeaseLost(self.item_id or "", self.lessee_id) from self.error
        if self.state == HeartbeatState.FAILED and self.error is not None:
            raise self.error
