"""Port bus primitives.

The host UI notifies the pipeline through named one-way ports (``print`` and
``log``).  Subscriptions are registered once at start-up and live as long as
the process, so the bus offers no way to unsubscribe.
"""
from __future__ import annotations

import asyncio
import datetime as _dt
import functools
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Set

PRINT_PORT = "print"
LOG_PORT = "log"

PortCallback = Callable[[Any], Any]

logger = logging.getLogger(__name__)


def utc_now() -> str:
    """Return the current UTC time formatted as an ISO 8601 string."""

    return _dt.datetime.now(_dt.timezone.utc).isoformat()


@dataclass
class Event:
    """Simple notification record stored in the bus history."""

    ts: str
    port: str
    payload: Any = None


@dataclass
class PortBus:
    """In-memory publish/subscribe registry keyed by port name."""

    subscribers: Dict[str, List[PortCallback]] = field(default_factory=dict)
    events: List[Event] = field(default_factory=list)
    _pending: Set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    def subscribe(self, port: str, callback: PortCallback) -> None:
        """Register ``callback`` for every future notification on ``port``."""

        self.subscribers.setdefault(port, []).append(callback)

    def send(self, port: str, payload: Any = None) -> List[asyncio.Task]:
        """Notify every subscriber of ``port`` with ``payload``.

        Plain callbacks run inline.  Coroutine callbacks are scheduled on the
        running event loop and the resulting tasks are returned so callers
        can await them; the bus itself never waits but keeps each task alive
        until it finishes and logs any exception it raises.
        """

        self.events.append(Event(ts=utc_now(), port=port, payload=payload))
        tasks: List[asyncio.Task] = []
        callbacks = self.subscribers.get(port, [])
        if not callbacks:
            logger.debug("No subscriber for port '%s'", port)
        for callback in list(callbacks):
            result = callback(payload)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result, loop=asyncio.get_running_loop())
                self._pending.add(task)
                task.add_done_callback(functools.partial(self._task_done, port))
                tasks.append(task)
        return tasks

    def _task_done(self, port: str, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Subscriber for port '%s' failed", port, exc_info=exc)

    def history(self) -> Iterable[Event]:
        """Return the chronological notification history."""

        return tuple(self.events)


__all__ = ["Event", "LOG_PORT", "PRINT_PORT", "PortBus", "utc_now"]
