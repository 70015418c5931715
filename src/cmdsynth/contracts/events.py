"""Graph events: immutable facts emitted by mutation and snapshotting.

Events are emitted by the Graph Mutator and the Snapshot Ledger only;
analyzers never produce them. They cross the persistence/messaging
boundary, so every event carries its own id, trace id and timestamp.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from cmdsynth.contracts.enums import GraphEventType
from cmdsynth.contracts.types import CommandEventId, CommandGraphId, CommandTraceId


@dataclass(frozen=True, slots=True)
class CommandGraphEvent:
    """A single fact about a command graph.

    Attributes:
        id: Event identifier (unique per graph, version and subject)
        graph_id: Graph the fact is about
        trace_id: Correlates events from the same run or node version
        event_type: Kind of fact
        timestamp: When the fact was recorded (canonical UTC format)
        payload: JSON-compatible event details (read-only view)
    """

    id: CommandEventId
    graph_id: CommandGraphId
    trace_id: CommandTraceId
    event_type: GraphEventType
    timestamp: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze payload so a stored event cannot be edited through a shared dict
        if not isinstance(self.payload, MappingProxyType):
            object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def to_payload(self) -> dict[str, Any]:
        """Export as a JSON-compatible dict in the planner's camelCase shape."""
        return {
            "id": self.id,
            "graphId": self.graph_id,
            "traceId": self.trace_id,
            "eventType": self.event_type.value,
            "timestamp": self.timestamp,
            "payload": dict(self.payload),
        }
