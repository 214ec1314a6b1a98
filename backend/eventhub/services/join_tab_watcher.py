"""
Live join tab view.

Events leave the join tab an hour after they start, so a view that stays
open has to drop them without a reload. Instead of recomputing on a fixed
tick, the watcher sleeps until the next cutoff among the events it holds
(never longer than `max_interval`) and publishes a new list only when the
visible set changed. Replacing the snapshot or the criteria wakes it up
immediately and always publishes.

The task lives exactly as long as the view: `stop()` cancels it.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, Sequence

from eventhub.core.logging import get_logger
from eventhub.core.metrics import join_tab_watchers, record_recheck
from eventhub.services.join_tab import JoinTabCriteria, filter_events, next_cutoff

logger = get_logger(__name__)

Publisher = Callable[[list], Awaitable[None]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JoinTabWatcher:
    def __init__(
        self,
        events: Sequence,
        criteria: JoinTabCriteria,
        publish: Publisher,
        *,
        clock: Callable[[], datetime] = utc_now,
        max_interval: Optional[float] = None,
        grace: Optional[timedelta] = None,
    ):
        self._events = list(events)
        self._criteria = criteria
        self._publish = publish
        self._clock = clock
        self._max_interval = max_interval
        self._grace = grace
        self._wake = asyncio.Event()
        self._force = True
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def criteria(self) -> JoinTabCriteria:
        return self._criteria

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="join-tab-watcher")
        join_tab_watchers.inc()

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # Publishing to a view that already went away
            logger.warning("join_tab_watcher_failed", error=str(e))
        finally:
            join_tab_watchers.dec()

    def replace_events(self, events: Sequence) -> None:
        self._events = list(events)
        self._nudge()

    def set_criteria(self, criteria: JoinTabCriteria) -> None:
        self._criteria = criteria
        self._nudge()

    def _nudge(self) -> None:
        self._force = True
        self._wake.set()

    def _delay(self, now: datetime) -> Optional[float]:
        upcoming = next_cutoff(self._events, now, self._grace)
        delay = None if upcoming is None else max((upcoming - now).total_seconds(), 0.0)
        if self._max_interval is not None:
            delay = self._max_interval if delay is None else min(delay, self._max_interval)
        return delay

    async def _run(self) -> None:
        last_ids: Optional[list] = None
        while True:
            self._wake.clear()
            force, self._force = self._force, False

            now = self._clock()
            visible = filter_events(self._events, self._criteria, now, self._grace)
            ids = [event.id for event in visible]
            changed = ids != last_ids
            record_recheck(changed)

            if changed or force:
                last_ids = ids
                await self._publish(visible)
                logger.debug("join_tab_published", visible=len(visible))

            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._delay(now))
            except asyncio.TimeoutError:
                pass
