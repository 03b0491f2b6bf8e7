"""
Event publishing for method outcomes.

Every print/status outcome is sent as a JSON event on a named output,
independently of the method response. Publishing is fire-and-forget from the
caller's point of view: failures are logged and never change the response.

OutboxEventPublisher keeps the most recent events in memory (bounded) and
exposes them through GET /api/events so a local operator or a forwarding
sidecar can read them.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, List, Optional

from core.exceptions import EventPublishError
from models.method_response import EventMessage
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class EventPublisher:
    """Interface: deliver an EventMessage to its output."""

    def send_event(self, message: EventMessage) -> None:
        """
        Raises:
            EventPublishError: If the event could not be delivered
        """
        raise NotImplementedError


class OutboxEventPublisher(EventPublisher):
    """Thread-safe bounded in-memory outbox."""

    def __init__(self, max_events: int = 100):
        if max_events <= 0:
            raise ValueError("max_events must be positive")
        self._events: Deque[EventMessage] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def send_event(self, message: EventMessage) -> None:
        with self._lock:
            self._events.append(message)

    def recent(self, output_name: Optional[str] = None, limit: Optional[int] = None) -> List[EventMessage]:
        """Most recent events, oldest first, optionally filtered by output."""
        with self._lock:
            events = [e for e in self._events if output_name is None or e.output_name == output_name]
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear(self) -> int:
        with self._lock:
            count = len(self._events)
            self._events.clear()
            return count


def publish_event(publisher: EventPublisher, output_name: str, body: bytes) -> bool:
    """
    Publish ``body`` on ``output_name``, logging instead of raising.

    Returns:
        True if the event was handed to the publisher, False otherwise
    """
    message = EventMessage(output_name=output_name, body=body)
    text = body.decode(message.content_encoding, errors="replace")

    try:
        publisher.send_event(message)
    except EventPublishError as e:
        logger.warning(f"Exception '{e}' while sending output message '{text}'")
        return False
    except Exception as e:
        error = EventPublishError(output_name, str(e))
        logger.warning(f"Exception '{error}' while sending output message '{text}'")
        return False

    logger.info(f"Event message '{text}' sent on '{output_name}'")
    return True
