"""
Stream events and event sinks.

The orchestrator reports progress by emitting StreamEvents into an
EventSink. Sinks preserve call order and never batch; the HTTP layer
frames each event as one Server-Sent Event:

    event: entry
    data: {"entry": {"country": "germany", "programName": "..."}}

"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import EventKind


@dataclass(frozen=True)
class StreamEvent:
    """One typed frame of the event stream."""
    kind: EventKind
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def progress(cls, message: str) -> 'StreamEvent':
        return cls(EventKind.PROGRESS, {'message': message})

    @classmethod
    def warning(cls, message: str) -> 'StreamEvent':
        return cls(EventKind.WARNING, {'message': message})

    @classmethod
    def entry(cls, entry: Dict[str, Any]) -> 'StreamEvent':
        return cls(EventKind.ENTRY, {'entry': dict(entry)})

    @classmethod
    def error(cls, message: str) -> 'StreamEvent':
        return cls(EventKind.ERROR, {'message': message})

    @classmethod
    def done(cls, count: int, results: List[Dict[str, Any]], elapsed_seconds: float) -> 'StreamEvent':
        return cls(EventKind.DONE, {
            'count': count,
            'results': [dict(r) for r in results],
            'elapsedSeconds': elapsed_seconds,
        })

    @property
    def terminal(self) -> bool:
        return self.kind.terminal

    def to_dict(self) -> Dict[str, Any]:
        return {'event': self.kind.value, **self.data}

    def to_sse(self) -> str:
        """Frame the event as a Server-Sent Event."""
        return f"event: {self.kind.value}\ndata: {json.dumps(self.data)}\n\n"


class EventSink:
    """Ordered destination for stream events."""

    async def emit(self, event: StreamEvent):
        raise NotImplementedError


class ListSink(EventSink):
    """Collects events in memory."""

    def __init__(self):
        self.events: List[StreamEvent] = []

    async def emit(self, event: StreamEvent):
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[StreamEvent]:
        return [e for e in self.events if e.kind == kind]


class QueueSink(EventSink):
    """
    Pushes events into an asyncio queue for a concurrent consumer.

    A None item is put on the queue by close() to tell the consumer
    the stream has ended.
    """

    def __init__(self, queue: Optional['asyncio.Queue[Optional[StreamEvent]]'] = None):
        self.queue: 'asyncio.Queue[Optional[StreamEvent]]' = queue or asyncio.Queue()

    async def emit(self, event: StreamEvent):
        await self.queue.put(event)

    async def close(self):
        await self.queue.put(None)
