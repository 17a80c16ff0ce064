"""
Change watcher.

Schedules reconciliation from two triggers: a debounced structural
mutation signal (child nodes added) and a fixed-interval task. Bursts of
mutations collapse into one call after the debounce delay.

Dependencies: asyncio, anchorkit.boundary.dom
System role: Keeps annotations visible while the host page changes
"""

import asyncio
import logging
from typing import Awaitable, Callable

from anchorkit.boundary.dom.page_document import MutationKind, MutationRecord, PageDocument, Subscription
from anchorkit.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], Awaitable[object]]


class ChangeWatcher:
    """
    Debounced mutation and interval trigger for reconciliation.

    Attributes:
        document: Observed document
        on_change: Coroutine function run on every trigger
        debounce_seconds: Quiet period after the last structural mutation
        interval_seconds: Periodic trigger; zero or negative disables it
    """

    def __init__(
        self,
        document: PageDocument,
        on_change: ChangeCallback,
        debounce_seconds: float = 1.0,
        interval_seconds: float = 5.0,
    ) -> None:
        self.document = document
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self.interval_seconds = interval_seconds

        self._subscription: Subscription | None = None
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._interval_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def running(self) -> bool:
        """Whether the watcher is subscribed."""
        return self._subscription is not None

    def start(self) -> None:
        """
        Subscribe to mutations and start the interval task.

        Must be called from a running event loop. Starting twice is a no-op.
        """
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._subscription = self.document.subscribe(self._on_mutations)
        if self.interval_seconds > 0:
            self._interval_task = self._loop.create_task(self._run_interval(), name="anchorkit_watcher_interval")
        logger.debug(
            f"Change watcher started (debounce={self.debounce_seconds}s, interval={self.interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Cancel the subscription, any pending debounce and the interval task."""
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

        tasks = list(self._pending)
        if self._interval_task is not None:
            tasks.append(self._interval_task)
            self._interval_task = None
        self._pending.clear()

        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("Change watcher stopped")

    def _on_mutations(self, records: list[MutationRecord]) -> None:
        structural = any(
            record.kind is MutationKind.CHILD_LIST and record.added_nodes
            for record in records
        )
        if structural:
            self._schedule_debounced()

    def _schedule_debounced(self) -> None:
        if self._loop is None or not self.running:
            return
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = self._loop.call_later(self.debounce_seconds, self._fire_debounced)

    def _fire_debounced(self) -> None:
        self._debounce_handle = None
        if not self.running:
            return
        task = self._loop.create_task(self._invoke("mutation"))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run_interval(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self._invoke("interval")

    async def _invoke(self, trigger: str) -> None:
        try:
            await self.on_change()
        except Exception as e:
            log_exception_with_context(logger, "Reconciliation trigger failed", e, trigger=trigger)
