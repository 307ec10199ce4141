"""Publish-subscribe event bus connecting the CncToolSelector plugins.

Handlers subscribe to an exact event name (``comparison.added``), to a
namespace (``comparison.*``) or to everything (``*``). A failing handler is
logged and never stops delivery to the others.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)

EventHandler = Callable

ALL_EVENTS = "*"


def _patterns_for(event: str) -> list:
    patterns = [event]
    namespace = event.split(".", 1)[0]
    if namespace != event:
        patterns.append(namespace + ".*")
    patterns.append(ALL_EVENTS)
    return patterns


class EventBus:
    def __init__(self, keep_history: bool = False, max_history: Optional[int] = 1000):
        self._subscribers: dict = {}
        self._keep_history = keep_history
        self._history: deque = deque(maxlen=max_history)
        self._lock = threading.Lock()

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        with self._lock:
            self._subscribers.setdefault(pattern, []).append(handler)

    def unsubscribe(self, pattern: str, handler: EventHandler) -> None:
        with self._lock:
            remaining = [h for h in self._subscribers.get(pattern, []) if h is not handler]
            if remaining:
                self._subscribers[pattern] = remaining
            else:
                self._subscribers.pop(pattern, None)

    def emit(self, event: str, data: dict) -> None:
        with self._lock:
            if self._keep_history:
                self._history.append({
                    "event": event,
                    "data": data,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                })
            handlers = [h for p in _patterns_for(event) for h in self._subscribers.get(p, [])]

        for handler in handlers:
            try:
                handler(data)
            except Exception:
                logger.exception("Event handler error for %s", event)

    def get_history(self, event: Optional[str] = None) -> list:
        """Recorded events, oldest first; ``event`` may be a name or ``namespace.*``."""
        with self._lock:
            records = list(self._history)
        if event is None:
            return records
        return [r for r in records if event in _patterns_for(r["event"])]

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()
