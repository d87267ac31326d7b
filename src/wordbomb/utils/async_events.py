"""Tiny asyncio event bus: listeners register per event type, a worker task dispatches."""
import asyncio
import logging
from collections import defaultdict
from dataclasses import fields
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventEngine:
    def __init__(self) -> None:
        self.listeners: dict[str, list[Callable]] = defaultdict(list)
        self.queue: asyncio.Queue = asyncio.Queue()
        self.running = False
        self._worker_task: asyncio.Task | None = None

    def on(self, event: str) -> Callable:
        def wrapper(func: Callable) -> Callable:
            self.listeners[event].append(func)
            return func
        return wrapper

    def trigger(self, event: Any) -> None:
        """Trigger a typed event.

        Args:
            event: A TurnEvent object with event_type and typed fields
        """
        if self.running:
            event_name = event.event_type.value if hasattr(event.event_type, 'value') else str(event.event_type)
            # Listeners receive every field except event_type as positional arguments
            event_args = tuple(getattr(event, f.name) for f in fields(event) if f.name != 'event_type')
            self.queue.put_nowait((event_name, event_args, {}))

    async def start(self) -> None:
        self.running = True
        self._worker_task = asyncio.create_task(self._worker(), name="event_worker")

    async def stop(self) -> None:
        self.running = False
        try:
            await asyncio.wait_for(self.queue.join(), timeout=2.0)
        except asyncio.TimeoutError:
            logger.warning("Event queue join timed out, there may be unfinished tasks.")
        if self._worker_task:
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass
            self._worker_task = None

    async def _worker(self) -> None:
        while self.running:
            try:
                event, args, kwargs = await asyncio.wait_for(self.queue.get(), timeout=0.1)
                try:
                    for func in self.listeners[event]:
                        try:
                            await func(*args, **kwargs)
                        except Exception as e:
                            logger.error(f"Event handler error: {e}")
                finally:
                    self.queue.task_done()
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break


events = EventEngine()
