"""
Session registry for delivering job events to the connected client.

Only one client is addressable at a time: the most recent connection
replaces the previous one. Each connection is an EventChannel feeding a
Server-Sent-Events response.
"""

import json
import logging
import threading
from queue import Empty, Queue
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)

# Sentinel pushed into a channel queue to end its stream
_CLOSE = object()


class EventChannel:
    """Thread-safe event queue backing one client event stream."""

    def __init__(self, keepalive_interval: float = 15.0):
        self.keepalive_interval = keepalive_interval
        self._queue: Queue = Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, event: str, data: Dict[str, Any]) -> bool:
        """Queue an event for delivery. Returns False if the channel is closed."""
        if self.closed:
            return False
        self._queue.put((event, data))
        return True

    def close(self) -> None:
        """End the stream without sending anything further."""
        if not self._closed.is_set():
            self._closed.set()
            self._queue.put(_CLOSE)

    def listen(self) -> Iterator[str]:
        """
        Yield Server-Sent-Events frames until the channel is closed.

        A comment frame is yielded every keepalive_interval seconds of
        silence so a dropped client is noticed on the next write.
        """
        while True:
            try:
                item = self._queue.get(timeout=self.keepalive_interval)
            except Empty:
                if self.closed:
                    return
                yield ": keepalive\n\n"
                continue

            if item is _CLOSE:
                return
            event, data = item
            yield format_sse(event, data)


def format_sse(event: str, data: Dict[str, Any]) -> str:
    """Format one Server-Sent-Events frame."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


class SessionRegistry:
    """Holds the single currently-connected client channel."""

    def __init__(self):
        self._channel: Optional[EventChannel] = None
        self._lock = threading.Lock()

    def register(self, channel: EventChannel) -> None:
        """Make channel the current session, detaching any previous one."""
        with self._lock:
            previous = self._channel
            self._channel = channel

        if previous is not None and previous is not channel:
            previous.close()
            logger.info("Client session replaced by a new connection")
        else:
            logger.info("Client connected")

    def clear(self, channel: EventChannel) -> bool:
        """
        Remove channel if it is still the current session.

        Returns:
            True if the channel was current and has been cleared
        """
        with self._lock:
            if self._channel is not channel:
                return False
            self._channel = None

        channel.close()
        logger.info("Client disconnected")
        return True

    def current(self) -> Optional[EventChannel]:
        with self._lock:
            return self._channel

    def emit(self, event: str, data: Dict[str, Any]) -> bool:
        """
        Send an event to the current session.

        Returns:
            True if delivered, False if no client is connected
        """
        channel = self.current()
        if channel is None or not channel.send(event, data):
            logger.debug(f"No client connected, dropping {event} event")
            return False
        return True
