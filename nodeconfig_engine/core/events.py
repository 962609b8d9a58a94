"""Events for bulk node operations."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

logger = logging.getLogger(__name__)


ALLOWED_EVENTS = {
    "nodes.configured",
    "nodes.added",
    "nodes.deleted",
    "nodes.online",
    "nodes.offline",
    "nodes.connected",
    "nodes.disconnected",
}


@dataclass
class NodeEvent:
    """Something happened to a set of nodes."""

    event_type: str
    node_names: List[str]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def nodes_configured(node_list, patch):
        """Settings applied to existing nodes."""
        return NodeEvent(
            event_type="nodes.configured",
            node_names=node_list.names(),
            metadata={"changed": patch.changed_fields()},
        )

    @staticmethod
    def nodes_added(node_list, patch):
        """New nodes registered."""
        return NodeEvent(
            event_type="nodes.added",
            node_names=node_list.names(),
            metadata={"changed": patch.changed_fields()},
        )

    @staticmethod
    def nodes_deleted(names):
        return NodeEvent(event_type="nodes.deleted", node_names=list(names))

    @staticmethod
    def computer_state(event_type: str, names, reason=None):
        """Online/offline/connect/disconnect requests."""
        return NodeEvent(
            event_type=event_type,
            node_names=list(names),
            metadata={"reason": reason} if reason else {},
        )


class EventEmitter(ABC):
    """Abstract event emitter."""

    @abstractmethod
    def emit(self, events: Iterable[NodeEvent]) -> None:
        """Emit one or more events."""
        pass


class RecordingEventEmitter(EventEmitter):
    """Keeps events in memory and logs them."""

    def __init__(self):
        self.events = []

    def emit(self, events: Iterable[NodeEvent]) -> None:
        for event in events:
            if event.event_type not in ALLOWED_EVENTS:
                raise ValueError(f"Invalid event type: {event.event_type}")

            self.events.append(event)
            logger.info(f"[EVENT] {event.event_type} | nodes={' '.join(event.node_names)}")


class MultiEventEmitter:
    """Fan-out to multiple emitters."""

    def __init__(self, emitters: Iterable[EventEmitter]):
        self._emitters = list(emitters)

    def emit(self, events: Iterable[NodeEvent]):
        events = list(events)
        for emitter in self._emitters:
            emitter.emit(events)


class NullEventEmitter(EventEmitter):
    """No-op emitter (used when events are not needed)."""

    def emit(self, events: Iterable[NodeEvent]) -> None:
        pass
