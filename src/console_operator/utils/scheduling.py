"""
Scheduling of sync passes.

Watch events only set a trigger; a single loop consumes it and runs one pass
at a time, so bursts of events coalesce into one pass and passes never
overlap. Without events a pass still runs on a jittered resync interval.
A pass that fails or requests a requeue is retried with exponential backoff.
"""

import asyncio
import random
import time
from collections.abc import Callable

from console_operator.errors import SyntheticRequeueError
from console_operator.observability.logging import OperatorLogger
from console_operator.observability.metrics import metrics_collector


def jittered(duration: float, max_factor: float) -> float:
    """
    Return ``duration`` plus a random amount up to ``max_factor * duration``.

    A non-positive factor disables jitter.
    """
    if max_factor <= 0:
        return duration
    return duration + random.random() * max_factor * duration


class SyncTrigger:
    """Level-triggered wake-up flag; any number of fires collapse into one."""

    def __init__(self):
        self._event = asyncio.Event()

    def fire(self) -> None:
        self._event.set()

    @property
    def pending(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: float | None = None) -> bool:
        """
        Wait until fired or until ``timeout`` elapses.

        Returns:
            True if the trigger fired; the flag is cleared before returning
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except TimeoutError:
            return False
        self._event.clear()
        return True


class SyncLoop:
    """
    Runs a blocking sync function whenever triggered, one pass at a time.

    The sync function runs in a worker thread with the pass's correlation ID
    in its context.
    """

    def __init__(
        self,
        sync: Callable[[], None],
        trigger: SyncTrigger,
        controller: str,
        resync_interval: float = 60.0,
        jitter_factor: float = 1.0,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
    ):
        self._sync = sync
        self.trigger = trigger
        self.controller = controller
        self.resync_interval = resync_interval
        self.jitter_factor = jitter_factor
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.has_synced = False
        self._failures = 0
        self._stopping = False
        self.logger = OperatorLogger(__name__)

    @property
    def failures(self) -> int:
        """Consecutive passes that failed or requested a requeue."""
        return self._failures

    def next_requeue_delay(self) -> float:
        if self._failures <= 0:
            return self.base_delay
        return min(self.base_delay * 2 ** (self._failures - 1), self.max_delay)

    async def run_once(self) -> float | None:
        """
        Run one pass.

        Returns:
            Delay before the pass should be retried, or None on success
        """
        self.logger.log_pass_start(self.controller)
        start_time = time.monotonic()

        try:
            with metrics_collector.track_sync(self.controller):
                await asyncio.to_thread(self._sync)
        except SyntheticRequeueError:
            self._failures += 1
            delay = self.next_requeue_delay()
            self.logger.log_pass_requeue(self.controller, delay)
            return delay
        except Exception as e:
            self._failures += 1
            self.logger.log_pass_error(
                self.controller, e, time.monotonic() - start_time
            )
            return self.next_requeue_delay()
        finally:
            self.has_synced = True

        self._failures = 0
        self.logger.log_pass_success(self.controller, time.monotonic() - start_time)
        return None

    async def run(self) -> None:
        """Run passes until ``stop`` is called."""
        while not self._stopping:
            delay = await self.run_once()
            if self._stopping:
                break
            if delay is None:
                delay = jittered(self.resync_interval, self.jitter_factor)
            await self.trigger.wait(delay)
        self.logger.info(f"Sync loop for {self.controller} stopped")

    def stop(self) -> None:
        self._stopping = True
        self.trigger.fire()
