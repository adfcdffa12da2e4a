"""
Fixed-interval polling of live snapshots.

One schedule per poll kind (flights, world, servers). Each schedule fetches
immediately, then every `interval` seconds. Every tick is its own task so a
slow response never delays the next tick; ticks are numbered and a response
is applied only if no newer tick of the same kind has been applied already.

Fetch failures never leave the poller: they are logged, turned into a
transient notice, and the last good snapshot of that kind is kept.
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set

from backend.core.models import Notice
from backend.data.live_api import LiveApiError
from common import logger as debug_logger

NotifyCallback = Callable[[Notice], None]


async def run_fetch(fetch_fn: Callable[..., Any], *args: Any) -> Any:
    """Await a coroutine fetch, or run a blocking one in the default executor."""
    if inspect.iscoroutinefunction(fetch_fn):
        return await fetch_fn(*args)
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, fetch_fn, *args)


@dataclass
class _Schedule:
    kind: str
    fetch_fn: Callable[[], Any]
    interval: float
    on_update: Callable[[Any], None]
    failure_message: str
    loop_task: Optional[asyncio.Task] = None
    tick_tasks: Set[asyncio.Task] = field(default_factory=set)
    issued_seq: int = 0
    applied_seq: int = 0


class Poller:
    """Owns the polling schedules of all data kinds."""

    def __init__(self, notify: Optional[NotifyCallback] = None):
        self._notify = notify
        self._schedules: Dict[str, _Schedule] = {}
        self._last_good: Dict[str, Any] = {}

    def start(
        self,
        kind: str,
        fetch_fn: Callable[[], Any],
        interval: float,
        on_update: Callable[[Any], None],
        failure_message: Optional[str] = None,
    ) -> None:
        """
        Start polling `kind`, replacing any schedule already running for it.

        `fetch_fn` is called without arguments. Plain functions run in the
        loop's default executor, coroutine functions are awaited. Must be
        called from a running event loop.
        """
        self.stop(kind)
        schedule = _Schedule(
            kind=kind,
            fetch_fn=fetch_fn,
            interval=interval,
            on_update=on_update,
            failure_message=failure_message or f"Failed to refresh {kind} data.",
        )
        self._schedules[kind] = schedule
        schedule.loop_task = asyncio.get_event_loop().create_task(self._run(schedule))
        debug_logger.debug(f"Poller: started '{kind}' every {interval}s")

    def stop(self, kind: str) -> None:
        """Cancel pending and future fetches of `kind`."""
        schedule = self._schedules.pop(kind, None)
        self._last_good.pop(kind, None)
        if schedule is None:
            return
        if schedule.loop_task is not None:
            schedule.loop_task.cancel()
        for task in list(schedule.tick_tasks):
            task.cancel()
        schedule.tick_tasks.clear()
        debug_logger.debug(f"Poller: stopped '{kind}'")

    def stop_all(self) -> None:
        for kind in list(self._schedules):
            self.stop(kind)

    def is_running(self, kind: str) -> bool:
        return kind in self._schedules

    def snapshot(self, kind: str) -> Any:
        """Last good snapshot of `kind`, or None before the first success."""
        return self._last_good.get(kind)

    async def _run(self, schedule: _Schedule) -> None:
        while True:
            self._spawn_tick(schedule)
            await asyncio.sleep(schedule.interval)

    def _spawn_tick(self, schedule: _Schedule) -> None:
        schedule.issued_seq += 1
        task = asyncio.get_event_loop().create_task(self._tick(schedule, schedule.issued_seq))
        schedule.tick_tasks.add(task)
        task.add_done_callback(schedule.tick_tasks.discard)

    async def _tick(self, schedule: _Schedule, seq: int) -> None:
        try:
            result = await run_fetch(schedule.fetch_fn)
        except LiveApiError as e:
            debug_logger.warning(f"Poller: '{schedule.kind}' tick {seq} failed: {e}")
            self._report(Notice(schedule.failure_message, "warning"))
            return
        except Exception as e:
            debug_logger.error(f"Poller: unexpected error in '{schedule.kind}' tick {seq}: {e}")
            self._report(Notice(schedule.failure_message, "error"))
            return

        if self._schedules.get(schedule.kind) is not schedule:
            debug_logger.debug(f"Poller: dropping '{schedule.kind}' tick {seq} from a stopped schedule")
            return
        if seq <= schedule.applied_seq:
            debug_logger.debug(f"Poller: dropping stale '{schedule.kind}' tick {seq} (applied {schedule.applied_seq})")
            return

        schedule.applied_seq = seq
        self._last_good[schedule.kind] = result
        schedule.on_update(result)

    def _report(self, notice: Notice) -> None:
        if self._notify is not None:
            self._notify(notice)
