"""Simple async pub/sub event bus for quickstart progress events"""

from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List
import asyncio
import logging

Subscriber = Callable[[Dict[str, Any]], Awaitable[None]]

# subscribe to this topic to receive every event
ALL_TOPICS = "*"


class Bus:
    def __init__(self):
        self._subs: Dict[str, List[Subscriber]] = defaultdict(list)
        self._log = logging.getLogger("bus")

    def subscribe(self, topic: str, fn: Subscriber):
        self._subs[topic].append(fn)
        self._log.debug("subscribe: %s -> %s (total subscribers: %d)", topic, getattr(fn, "__name__", str(fn)), len(self._subs[topic]))

    def unsubscribe(self, topic: str, fn: Subscriber):
        subs = self._subs.get(topic)
        if subs and fn in subs:
            subs.remove(fn)
            if not subs:
                del self._subs[topic]
        self._log.debug("unsubscribe: %s -> %s", topic, getattr(fn, "__name__", str(fn)))

    async def publish(self, topic: str, payload: Dict[str, Any]):
        """Deliver to topic subscribers and wildcard subscribers, waiting for all of them."""
        subscribers = list(self._subs.get(topic, [])) + list(self._subs.get(ALL_TOPICS, []))
        self._log.debug("publish: %s -> %d subscribers", topic, len(subscribers))
        if not subscribers:
            return

        results = await asyncio.gather(*(fn(payload) for fn in subscribers), return_exceptions=True)
        # a broken progress printer must not abort the run
        for fn, result in zip(subscribers, results):
            if isinstance(result, Exception):
                self._log.error("publish: subscriber %s raised on %s: %s", getattr(fn, "__name__", str(fn)), topic, result, exc_info=result)
