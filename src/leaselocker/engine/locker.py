"""LeaseLocker core - obtain and renew leases against a lease store."""

import asyncio
import logging
from datetime import datetime, timedelta
from time import perf_counter
from typing import Callable, Optional

from leaselocker.engine.errors import LeaseContention, LeaseNotObtained
from leaselocker.models.enums import HeartbeatState
from leaselocker.models.heartbeat import HeartbeatResult
from leaselocker.models.lease import Lease, LeaseRequest
from leaselocker.observability.metrics import MetricsRegistry, metrics as default_metrics
from leaselocker.stores.base import LockerStore
from leaselocker.utils.time import utc_now


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


async def _wait(stop_event: Optional[asyncio.Event], seconds: float) -> bool:
    """Sleep for ``seconds``; return True if the stop event fired first."""
    if stop_event is None:
        await asyncio.sleep(seconds)
        return False
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


class Locker:
    """
    Obtains and renews leases on items from a lease store.

    A Locker holds no lease state of its own; every attempt goes to the store,
    which alone decides who owns an item. One Locker may serve many concurrent
    heartbeats, each in its own task.
    """

    def __init__(
        self,
        store: LockerStore,
        *,
        logger: logging.Logger | None = None,
        metrics: MetricsRegistry | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.metrics = metrics or default_metrics
        self._now_provider = now_provider or utc_now

    def _until(self, request: LeaseRequest) -> datetime:
        return self._now_provider() + request.lease_duration()

    async def obtain_lease(self, request: LeaseRequest) -> Lease:
        """
        Lease the first available item, trying candidates in store order.

        Contended items are skipped. Any other error aborts the scan and is
        raised unchanged.

        Raises:
            LeaseNotObtained: every candidate was contended (or there were none)
        """
        lessee_id = request.lessee_id()
        start = perf_counter()
        lease_ids = await self.store.list_lease_ids()

        try:
            for lease_id in lease_ids:
                try:
                    lease = await self.store.lease(lease_id, request, self._until(request))
                except LeaseContention:
                    self.metrics.inc_counter("lease.contention")
                    continue

                self.logger.info(f"Obtained lease lessee_id={lessee_id} lease_id={lease.item_id}")
                self.metrics.inc_counter("lease.obtained")
                return lease
        finally:
            self.metrics.observe("lease.scan.duration_ms", (perf_counter() - start) * 1000.0)

        self.metrics.inc_counter("lease.not_obtained")
        raise LeaseNotObtained(lessee_id, len(lease_ids))

    async def wait_until_lease_obtained(
        self,
        request: LeaseRequest,
        poll_interval: float | timedelta,
        stop_event: Optional[asyncio.Event] = None,
    ) -> Lease | None:
        """
        Keep scanning until a lease is obtained.

        Waits ``poll_interval`` after every failed scan, whatever the reason.
        Returns None if ``stop_event`` is set before a lease is obtained.
        """
        interval = _seconds(poll_interval)
        while stop_event is None or not stop_event.is_set():
            try:
                return await self.obtain_lease(request)
            except LeaseNotObtained as e:
                self.logger.debug(str(e))
            except Exception as e:
                self.logger.warning(
                    f"Lease scan failed for lessee_id={request.lessee_id()}: {e}"
                )

            if await _wait(stop_event, interval):
                break

        self.logger.info(f"Stopped waiting for a lease lessee_id={request.lessee_id()}")
        return None

    async def renew_lease(self, lease: Lease) -> Lease:
        """Renew ``lease`` once, returning a fresh lease record."""
        renewed = await self.store.lease(lease.item_id, lease.request, self._until(lease.request))
        self.logger.info(
            f"Renewed lease lessee_id={lease.request.lessee_id()} lease_id={renewed.item_id}"
        )
        self.metrics.inc_counter("lease.renewed")
        return renewed

    async def heartbeat(
        self,
        lease: Lease,
        interval: float | timedelta,
        stop_event: Optional[asyncio.Event] = None,
    ) -> HeartbeatResult:
        """
        Renew ``lease`` every ``interval`` until it is lost, fails or is stopped.

        ``lease`` is refreshed in place after each renewal. The interval must be
        comfortably shorter than the lease duration; this is not checked.

        State transitions:
        - HELD -> HELD: renewal succeeded
        - HELD -> LOST: renewal hit contention
        - HELD -> FAILED: renewal raised any other error
        - HELD -> STOPPED: stop_event was set
        """
        tick = _seconds(interval)
        lessee_id = lease.request.lessee_id()
        state = HeartbeatState.HELD
        renewals = 0
        error: Exception | None = None

        while state == HeartbeatState.HELD:
            if await _wait(stop_event, tick):
                state = HeartbeatState.STOPPED
                break

            try:
                renewed = await self.renew_lease(lease)
            except LeaseContention as e:
                self.logger.warning(f"Lease lost lessee_id={lessee_id} lease_id={lease.item_id}")
                self.metrics.inc_counter("lease.lost")
                state, error = HeartbeatState.LOST, e
            except Exception as e:
                self.logger.error(
                    f"Lease renewal failed lessee_id={lessee_id} lease_id={lease.item_id}: {e}",
                    exc_info=True,
                )
                self.metrics.inc_counter("lease.heartbeat_failed")
                state, error = HeartbeatState.FAILED, e
            else:
                lease.expires_at = renewed.expires_at
                lease.payload = renewed.payload
                renewals += 1

        return HeartbeatResult(
            state=state,
            item_id=lease.item_id,
            lessee_id=lessee_id,
            renewals=renewals,
            error=error,
        )

    async def hold(
        self,
        request: LeaseRequest,
        heartbeat_interval: float | timedelta,
        poll_interval: float | timedelta,
        stop_event: Optional[asyncio.Event] = None,
    ) -> HeartbeatResult:
        """Wait for a lease, then heartbeat it until the session ends."""
        lease = await self.wait_until_lease_obtained(request, poll_interval, stop_event)
        if lease is None:
            return HeartbeatResult(state=HeartbeatState.STOPPED, lessee_id=request.lessee_id())
        return await self.heartbeat(lease, heartbeat_interval, stop_event)
