"""
Event Bus - Typed event routing between engine components

Implements pub-sub pattern:
- Publishers: publish(event) / emit(event)
- Subscribers: subscribe(event_type, handler, priority, filter_fn)
- Middleware: add_middleware(middleware_fn)

Each engine owns its own bus instance; there is no process-global bus.
"""

import asyncio
from typing import Callable, List, Dict, Optional, Set
from dataclasses import dataclass
from forgemotion.models.events import Event, EventType
from forgemotion.utils.logger import get_logger, LogCategory

log = get_logger()


@dataclass
class EventHandler:
    """Event handler registration"""
    handler: Callable[[Event], None]
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]


class EventBus:
    """
    Event bus for pub-sub event handling

    Features:
    - Priority-based handler execution (high priority first)
    - Per-handler filtering (fine-grained control)
    - Middleware pipeline (logging, blocking)
    - Async/sync handler support (auto-detected)
    - Fault tolerance (one handler crash doesn't stop others)

    Two publishing paths:
    - await publish(event): awaits async handlers in priority order
    - emit(event): synchronous, used from inside frame callbacks; async
      handlers are scheduled as tasks on the running loop

    Example:
        bus = EventBus()

        bus.subscribe(
            EventType.ANIMATION_FINISHED,
            on_finished,
            filter_fn=lambda e: e.node_id.startswith("hero-")
        )

        bus.emit(AnimationFinishedEvent("hero-title", AnimationKind.TITLE_CHARS))
    """

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._middleware: List[Callable[[Event], Optional[Event]]] = []

        # Event history (circular buffer for debugging)
        self._event_history: List[Event] = []
        self._history_limit = 100

        # Tasks scheduled by emit() for async handlers, held until done
        self._pending_tasks: Set[asyncio.Task] = set()

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable[[Event], None],
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> None:
        """
        Subscribe to event type

        Args:
            event_type: Which events to listen for
            handler: Function to call (can be async or sync)
            priority: Execution priority (higher = called first, default: 0)
            filter_fn: Optional filter (return True = handle, False = skip)
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []

        handler_entry = EventHandler(handler, priority, filter_fn)
        self._handlers[event_type].append(handler_entry)

        # Sort by priority (descending - highest first); sort is stable
        self._handlers[event_type].sort(key=lambda h: h.priority, reverse=True)

        log.debug(
            LogCategory.EVENT,
            "Event handler subscribed",
            event_type=event_type.name,
            handler=getattr(handler, "__name__", repr(handler)),
            priority=priority
        )

    def unsubscribe(self, event_type: EventType, handler: Callable[[Event], None]) -> bool:
        """Remove a handler. Returns True if it was subscribed."""
        handlers = self._handlers.get(event_type, [])
        for entry in handlers:
            if entry.handler == handler:
                handlers.remove(entry)
                return True
        return False

    def add_middleware(self, middleware: Callable[[Event], Optional[Event]]) -> None:
        """
        Add middleware to event processing pipeline

        Middleware can modify events (return modified event), block events
        (return None) or just observe them. Runs in registration order.
        """
        self._middleware.append(middleware)
        log.debug(
            LogCategory.EVENT,
            "Middleware registered",
            middleware=getattr(middleware, "__name__", repr(middleware))
        )

    def _prepare(self, event: Event) -> Optional[List[EventHandler]]:
        """Apply middleware, record history, return matching handlers (None if blocked)"""
        for middleware in self._middleware:
            processed_event = middleware(event)
            if processed_event is None:
                return None
            event = processed_event

        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

        handlers = self._handlers.get(event.type, [])
        return [h for h in handlers if not h.filter_fn or h.filter_fn(event)]

    def _report_failure(self, entry: EventHandler, event: Event, e: Exception) -> None:
        log.error(
            LogCategory.EVENT,
            f"Event handler failed: {getattr(entry.handler, '__name__', entry.handler)} for {event.type.name}",
            error=f"{type(e).__name__}: {e}"
        )

    async def publish(self, event: Event) -> None:
        """
        Publish event to all subscribers, awaiting async handlers

        Flow:
        1. Apply middleware (can modify or block event)
        2. Save to event history
        3. Execute matching handlers by priority (high → low)
        4. Catch and log handler exceptions (fault tolerance)
        """
        handlers = self._prepare(event)
        if not handlers:
            return

        for handler_entry in handlers:
            try:
                if asyncio.iscoroutinefunction(handler_entry.handler):
                    await handler_entry.handler(event)
                else:
                    handler_entry.handler(event)
            except Exception as e:
                self._report_failure(handler_entry, event, e)

    def emit(self, event: Event) -> None:
        """
        Publish event synchronously

        Sync handlers run inline. Async handlers are scheduled on the running
        event loop; without one they are skipped with a warning.
        """
        handlers = self._prepare(event)
        if not handlers:
            return

        for handler_entry in handlers:
            try:
                if asyncio.iscoroutinefunction(handler_entry.handler):
                    try:
                        loop = asyncio.get_running_loop()
                    except RuntimeError:
                        log.warn(
                            LogCategory.EVENT,
                            "Async handler skipped (no running loop)",
                            event_type=event.type.name,
                        )
                        continue
                    task = loop.create_task(handler_entry.handler(event))
                    self._pending_tasks.add(task)
                    task.add_done_callback(
                        lambda t, entry=handler_entry, ev=event: self._task_done(t, entry, ev)
                    )
                else:
                    handler_entry.handler(event)
            except Exception as e:
                self._report_failure(handler_entry, event, e)

    def _task_done(self, task: asyncio.Task, entry: EventHandler, event: Event) -> None:
        self._pending_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if isinstance(error, Exception):
            self._report_failure(entry, event, error)

    def pending_tasks(self) -> int:
        """Async handler tasks scheduled by emit() that have not finished"""
        return len(self._pending_tasks)

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """Get recent events from history (newest last)"""
        return self._event_history[-limit:]

    def clear_history(self) -> None:
        """Clear event history"""
        self._event_history.clear()
