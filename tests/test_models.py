"""
Lease model and lease request tests.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import BaseModel

from leaselocker.engine import LeaseLost, PayloadDecodeError, StoreUnavailable
from leaselocker.models import (
    HeartbeatResult,
    HeartbeatState,
    Lease,
    LeaseRequest,
    StaticLeaseRequest,
)
from leaselocker.utils.time import from_unix_nanos, to_unix_nanos


class ShardPayload(BaseModel):
    mongo_addresses: str = ""
    replicas: int = 0


def test_static_request_is_a_lease_request():
    request = StaticLeaseRequest("lessee1", timedelta(seconds=30))

    assert isinstance(request, LeaseRequest)
    assert request.lessee_id() == "lessee1"
    assert request.lease_duration() == timedelta(seconds=30)


def test_static_request_rejects_bad_arguments():
    with pytest.raises(ValueError):
        StaticLeaseRequest("", timedelta(seconds=30))
    with pytest.raises(ValueError):
        StaticLeaseRequest("lessee1", timedelta(0))
    request = StaticLeaseRequest("lessee1", timedelta(seconds=30))
    with pytest.raises(ValueError):
        request.extend_to(timedelta(seconds=-1))


def test_decode_without_attributes_returns_zero_payload():
    assert StaticLeaseRequest("l", timedelta(seconds=1)).decode_payload(None) == {}

    typed = StaticLeaseRequest("l", timedelta(seconds=1), ShardPayload)
    assert typed.decode_payload(None) == ShardPayload()


def test_decode_invalid_attributes_raises_decode_error():
    request = StaticLeaseRequest("l", timedelta(seconds=1), ShardPayload)

    with pytest.raises(PayloadDecodeError) as exc_info:
        request.decode_payload({"replicas": "many"})

    assert exc_info.value.code == "PAYLOAD_DECODE_ERROR"


def test_lease_expiry_helpers():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    lease = Lease(
        item_id="a",
        request=StaticLeaseRequest("l", timedelta(seconds=30)),
        expires_at=now + timedelta(seconds=30),
    )

    assert not lease.is_expired(now)
    assert lease.remaining(now) == timedelta(seconds=30)
    assert lease.is_expired(now + timedelta(seconds=30))
    assert lease.remaining(now + timedelta(minutes=5)) == timedelta(0)
    assert lease.lessee_id == "l"


def test_lease_rejects_non_request():
    with pytest.raises(ValueError):
        Lease(item_id="a", request="not-a-request", expires_at=datetime.now(timezone.utc))


def test_heartbeat_result_raise_for_state():
    HeartbeatResult(state=HeartbeatState.STOPPED, lessee_id="l").raise_for_state()

    lost = HeartbeatResult(state=HeartbeatState.LOST, item_id="a", lessee_id="l")
    with pytest.raises(LeaseLost):
        lost.raise_for_state()

    failed = HeartbeatResult(
        state=HeartbeatState.FAILED,
        item_id="a",
        lessee_id="l",
        error=StoreUnavailable("lease", "timeout"),
    )
    with pytest.raises(StoreUnavailable):
        failed.raise_for_state()


def test_heartbeat_terminal_states():
    assert not HeartbeatState.HELD.is_terminal()
    assert all(
        state.is_terminal()
        for state in (HeartbeatState.LOST, HeartbeatState.FAILED, HeartbeatState.STOPPED)
    )


def test_unix_nanos_conversion():
    value = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)

    assert to_unix_nanos(value) == 1714979289123456000
    assert from_unix_nanos(to_unix_nanos(value)) == value
    with pytest.raises(ValueError):
        to_unix_nanos(datetime(2024, 1, 1))
