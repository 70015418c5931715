"""Graph Model: command nodes, dependency edges, waves and the graph aggregate.

All types are frozen value objects. Operations that "change" a graph return
a new instance built with ``dataclasses.replace``; nothing in cmdsynth edits
a node, edge or graph in place.

Referential integrity (edges pointing at existing node ids) is a
precondition owned by whoever builds the graph. These types validate only
local field invariants.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias

from cmdsynth.contracts.enums import (
    CommandConstraintState,
    CommandExecutionState,
    CommandSeverity,
    CommandUrgency,
    GraphSource,
)
from cmdsynth.contracts.events import CommandGraphEvent
from cmdsynth.contracts.timestamps import parse_timestamp
from cmdsynth.contracts.types import CommandGraphId, CommandNodeId, CommandWaveId


# Scalar values an edge payload may carry
EdgePayloadValue: TypeAlias = str | int | float | bool | None


class GraphContractError(ValueError):
    """Raised when a graph value violates a local field invariant."""

    pass


@dataclass(frozen=True, slots=True)
class NodeMetadata:
    """Ownership and tagging metadata for a command node."""

    owner: str
    region: str
    labels: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    tags_version: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "region": self.region,
            "labels": list(self.labels),
            "tags": list(self.tags),
            "tagsVersion": self.tags_version,
        }


@dataclass(frozen=True, slots=True)
class NodeStateWindow:
    """Interval a node's current state is expected to hold (planner keys ``from``/``to``)."""

    start: str
    end: str

    def __post_init__(self) -> None:
        if parse_timestamp(self.end) < parse_timestamp(self.start):
            raise GraphContractError(f"state window ends at {self.end} before it starts at {self.start}")

    def to_payload(self) -> dict[str, Any]:
        return {"from": self.start, "to": self.end}


@dataclass(frozen=True, slots=True)
class CommandNode:
    """A unit of recovery work within a graph.

    Invariants:
        - weight is non-negative
        - state_at is not earlier than created_at
        - version never decreases across mutations of the same id (enforced
          by the mutation helpers, not here)
    """

    id: CommandNodeId
    graph_id: CommandGraphId
    name: str
    group: str
    weight: float
    severity: CommandSeverity
    urgency: CommandUrgency
    state: CommandConstraintState
    created_at: str
    updated_at: str
    state_at: str
    version: int
    metadata: NodeMetadata
    state_reason: str | None = None
    state_window: NodeStateWindow | None = None

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise GraphContractError(f"node '{self.id}' has negative weight {self.weight}")
        if parse_timestamp(self.state_at) < parse_timestamp(self.created_at):
            raise GraphContractError(f"node '{self.id}' state_at {self.state_at} precedes created_at {self.created_at}")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "graphId": self.graph_id,
            "name": self.name,
            "group": self.group,
            "weight": self.weight,
            "severity": self.severity.value,
            "urgency": self.urgency.value,
            "state": self.state.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "stateAt": self.state_at,
            "version": self.version,
            "metadata": self.metadata.to_payload(),
        }
        if self.state_reason is not None:
            payload["stateReason"] = self.state_reason
        if self.state_window is not None:
            payload["stateWindow"] = self.state_window.to_payload()
        return payload


@dataclass(frozen=True, slots=True)
class CommandEdge:
    """Directed dependency: ``source`` must run before ``target``.

    Named ``source``/``target`` because ``from`` is a Python keyword; the
    exported payload uses the planner's ``from``/``to`` keys.
    """

    source: CommandNodeId
    target: CommandNodeId
    order: int
    latency_budget_ms: float
    cost: float
    confidence: float
    payload: Mapping[str, EdgePayloadValue] | None = field(default=None, hash=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise GraphContractError(f"edge {self.source}->{self.target} confidence {self.confidence} outside [0, 1]")
        if self.payload is not None and not isinstance(self.payload, MappingProxyType):
            object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def to_payload(self) -> dict[str, Any]:
        exported: dict[str, Any] = {
            "from": self.source,
            "to": self.target,
            "order": self.order,
            "latencyBudgetMs": self.latency_budget_ms,
            "cost": self.cost,
            "confidence": self.confidence,
        }
        if self.payload is not None:
            exported["payload"] = dict(self.payload)
        return exported


@dataclass(frozen=True, slots=True)
class CommandWave:
    """A computed execution layer.

    Every command in wave k has all incoming-edge sources in waves < k,
    unless the graph is cyclic (cycle members never land in any wave).
    """

    id: CommandWaveId
    graph_id: CommandGraphId
    title: str
    index: int
    commands: tuple[CommandNode, ...]
    depends_on: tuple[CommandWaveId, ...] = ()
    execution_state: CommandExecutionState = CommandExecutionState.QUEUED

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "graphId": self.graph_id,
            "title": self.title,
            "index": self.index,
            "commands": [node.to_payload() for node in self.commands],
            "dependsOn": list(self.depends_on),
            "executionState": self.execution_state.value,
        }


@dataclass(frozen=True, slots=True)
class GraphMetadata:
    source: GraphSource
    revision: int
    requested_by: str
    notes: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "revision": self.revision,
            "requestedBy": self.requested_by,
            "notes": list(self.notes),
        }


@dataclass(frozen=True, slots=True)
class CommandGraph:
    """Aggregate root: the command nodes and edges of one recovery run.

    ``waves`` is derived by the topology analyzer and may be empty before
    planning. ``events`` holds the facts emitted by the most recent
    mutation (empty for graphs straight from a planner).
    """

    id: CommandGraphId
    tenant: str
    run_id: str
    root_plan_id: str
    nodes: tuple[CommandNode, ...]
    edges: tuple[CommandEdge, ...]
    created_at: str
    updated_at: str
    metadata: GraphMetadata
    waves: tuple[CommandWave, ...] = ()
    events: tuple[CommandGraphEvent, ...] = field(default=(), compare=False)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def get_node(self, node_id: str) -> CommandNode:
        """Look up a node by id.

        Raises:
            KeyError: If no node has that id
        """
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def to_payload(self) -> dict[str, Any]:
        """Export in the planner's camelCase shape (accepted by parse_command_graph)."""
        return {
            "id": self.id,
            "tenant": self.tenant,
            "runId": self.run_id,
            "rootPlanId": self.root_plan_id,
            "nodes": [node.to_payload() for node in self.nodes],
            "edges": [edge.to_payload() for edge in self.edges],
            "waves": [wave.to_payload() for wave in self.waves],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "metadata": self.metadata.to_payload(),
        }


def build_node_fingerprint(graph: CommandGraph, node: CommandNode) -> str:
    """Identity of a node at a specific version and state."""
    return f"{graph.id}/{graph.tenant}/{node.id}/{node.version}/{node.state.value}"


def build_graph_fingerprint(graph: CommandGraph) -> str:
    return "|".join(build_node_fingerprint(graph, node) for node in graph.nodes)


def summarize_by_severity(nodes: tuple[CommandNode, ...] | list[CommandNode]) -> dict[CommandSeverity, int]:
    """Count nodes per severity. Every severity is present, possibly zero."""
    counts = dict.fromkeys(CommandSeverity, 0)
    for node in nodes:
        counts[node.severity] += 1
    return counts


def order_by_group(nodes: tuple[CommandNode, ...] | list[CommandNode]) -> list[CommandNode]:
    """Sort nodes by group ascending, then weight descending, then state."""
    return sorted(nodes, key=lambda node: (node.group, -node.weight, node.state.value))
