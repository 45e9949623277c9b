# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Event bus module for per-network event management."""

import json
import logging

from collections import defaultdict
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Any
from pydantic import BaseModel, PrivateAttr

from ..types.event_types import EventType, Event

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class EventEncoder(json.JSONEncoder):
    """JSON encoder for handling special types in event serialization."""
    def default(self, obj: Any) -> Any:
        if isinstance(obj, Event):
            return {
                "type": obj.type.value,
                "content": obj.content,
                "metadata": obj.metadata,
                "timestamp": obj.timestamp.isoformat(),
            }
        elif hasattr(obj, "model_dump"):
            # Pydantic models (ToolResult, AgentResult, Completion, ...)
            return obj.model_dump(mode="json")
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, timedelta):
            return obj.total_seconds()
        elif isinstance(obj, BaseException):
            return f"{type(obj).__name__}: {obj}"
        elif callable(obj):
            return None
        return super().default(obj)


class EventBus(BaseModel):
    """
    Ordered record of everything that happened in one network run, with
    publish/subscribe for observers.

    Each network owns its own bus; nothing here is shared between networks.
    The bus is purely observational: agents rebuild their history from the
    network's result log, never from events.
    """

    _subscribers: Dict[EventType, List[Callable]] = PrivateAttr(
        default_factory=lambda: defaultdict(list)
    )
    _events: List[Event] = PrivateAttr(default_factory=list)
    _metadata: Dict[str, str | None] = PrivateAttr(
        default_factory=lambda: {
            "version": "1.0",
            "created_at": datetime.now().isoformat(),
            "last_saved": None,
        }
    )

    async def publish(self, event: Event, publisher_id: str) -> None:
        """Publish an event to the bus.

        Args:
            event: The event to publish
            publisher_id: Name of the network or agent publishing the event
        """
        logger.debug(f"New event from {publisher_id}: {event.type}")
        event.metadata["publisher_id"] = publisher_id
        self._events.append(event)

        for callback in list(self._subscribers[event.type]):
            try:
                await callback(event)
            except Exception as e:
                logger.error(f"Error in event subscriber {callback}: {e}")

    def subscribe(
        self,
        event_type: EventType | set[EventType] | list[EventType] | tuple[EventType],
        callback: Callable,
    ) -> None:
        """Subscribe to events of a specific type.

        Args:
            event_type: Single EventType or collection of EventTypes to subscribe to
            callback: Async callback function for event handling
        """
        if isinstance(event_type, (set, list, tuple)):
            for et in event_type:
                logger.debug(f"Subscribing {callback} to {et}")
                self._subscribers[et].append(callback)
        else:
            logger.debug(f"Subscribing {callback} to {event_type}")
            self._subscribers[event_type].append(callback)

    def unsubscribe(
        self,
        event_type: EventType | set[EventType] | list[EventType] | tuple[EventType],
        callback: Callable,
    ) -> None:
        """Unsubscribe from events of a specific type."""
        if isinstance(event_type, (set, list, tuple)):
            for et in event_type:
                if callback in self._subscribers[et]:
                    self._subscribers[et].remove(callback)
        else:
            if callback in self._subscribers[event_type]:
                self._subscribers[event_type].remove(callback)

    def get_events(self, publisher_id: str | None = None) -> List[Event]:
        """Get all events, optionally restricted to a single publisher, in
        publication order."""
        if publisher_id is None:
            return list(self._events)
        return [e for e in self._events if e.metadata.get("publisher_id") == publisher_id]

    def get_events_by_type(self, event_type: EventType) -> List[Event]:
        """Get all events of a specific type across all publishers."""
        return [e for e in self._events if e.type == event_type]

    def clear(self) -> None:
        """Clear all events and subscribers (mainly for testing)."""
        self._events.clear()
        self._subscribers.clear()

    def save_state(self, directory: Path) -> None:
        """Save the event trace to disk as JSON.

        Args:
            directory: The directory to save state in
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        self._metadata["last_saved"] = datetime.now().isoformat()
        (directory / "metadata.json").write_text(json.dumps(self._metadata, indent=2))
        (directory / "events.json").write_text(
            json.dumps(self._events, indent=2, cls=EventEncoder)
        )

    @classmethod
    def load_events(cls, directory: Path) -> List[Event]:
        """Read back an event trace saved with ``save_state``.

        Metadata values come back as their JSON representation.
        """
        events_file = Path(directory) / "events.json"
        if not events_file.exists():
            return []
        return [
            Event(
                type=EventType(data["type"]),
                content=data["content"],
                metadata=data["metadata"],
                timestamp=datetime.fromisoformat(data["timestamp"]),
            )
            for data in json.loads(events_file.read_text())
        ]
