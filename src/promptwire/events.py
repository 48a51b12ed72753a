"""Stream events and the event bus interface."""

import logging
from typing import List, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class StreamEvent(BaseModel):
    """One SSE data frame received during a streaming call."""

    model_config = ConfigDict(frozen=True)

    body: str
    stream_id: str


@runtime_checkable
class EventBus(Protocol):
    def publish(self, event: StreamEvent) -> None:
        ...


class NullEventBus:
    """Discards every event."""

    def publish(self, event: StreamEvent) -> None:
        pass


class CollectingEventBus:
    """Keeps published events in memory."""

    def __init__(self):
        self.events: List[StreamEvent] = []

    def publish(self, event: StreamEvent) -> None:
        self.events.append(event)


def publish_safely(bus: EventBus, event: StreamEvent) -> None:
    """Publish without letting a faulty bus break the stream."""
    try:
        bus.publish(event)
    except Exception as e:
        logger.warning(f"Failed to publish stream event for {event.stream_id}: {e}")
